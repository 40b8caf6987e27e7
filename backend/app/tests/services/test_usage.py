import httpx
import pytest

from app.services.usage import collect_usage, elevenlabs_usage, format_currency, openrouter_usage


def test_format_currency():
    assert format_currency(1.234567) == {"readable": "$1.23", "complete": "$1.234567", "raw": 1.234567}
    assert format_currency(None)["readable"] == "$0.00"
    assert format_currency("oops")["raw"] == 0.0
    assert format_currency(2.999)["readable"] == "$3.00"


def _transport():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "openrouter.ai":
            assert request.headers["authorization"] == "Bearer or-key"
            return httpx.Response(200, json={"data": {"usage": 1.5, "limit": 10, "limit_remaining": 8.5}})
        assert request.url.path == "/v1/user/subscription"
        return httpx.Response(
            200, json={"tier": "creator", "character_limit": 100000, "character_count": 2500}
        )

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_collect_usage_reports_both_providers():
    report = await collect_usage("or-key", "el-key", transport=_transport())

    open_router = report["open_router"]
    assert open_router["service"] == "OpenRouter"
    assert open_router["usage"]["readable"] == "$1.50"
    assert open_router["limit"]["readable"] == "$10.00"
    assert open_router["limit_remaining"]["readable"] == "$8.50"
    assert open_router["has_limit"] is True

    eleven = report["eleven_labs"]
    assert eleven["tier"] == "creator"
    assert eleven["character_limit"] == "100,000"
    assert eleven["character_count"] == "2,500"
    assert eleven["character_remaining"] == "97,500"


@pytest.mark.asyncio
async def test_provider_failure_is_reported_per_service():
    failing = httpx.MockTransport(lambda r: httpx.Response(503))

    open_router = await openrouter_usage("or-key", transport=failing)
    eleven = await elevenlabs_usage("el-key", transport=failing)

    assert open_router["service"] == "OpenRouter"
    assert open_router["error"].startswith("Erro ao consultar OpenRouter")
    assert eleven["service"] == "ElevenLabs"
    assert eleven["error"].startswith("Erro ao consultar ElevenLabs")


@pytest.mark.asyncio
async def test_openrouter_without_limit():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"data": {"usage": 0.25, "limit": None}}))
    report = await openrouter_usage("or-key", transport=transport)
    assert report["has_limit"] is False
    assert report["limit"] is None
