"""
Provider balance and usage reports shown on the admin "consumo" page.

Each provider is queried independently; a failure on one side is reported
as `{"error", "service"}` without affecting the other.
"""
import asyncio
import logging
import math
from typing import Any

import httpx

from app.core.config import settings
from app.services.elevenlabs import ElevenLabsClient, ElevenLabsHttpError

logger = logging.getLogger(__name__)


def format_currency(value: Any) -> dict[str, Any]:
    try:
        num_value = float(value or 0)
    except (TypeError, ValueError):
        num_value = 0.0
    dollars = math.floor(num_value)
    cents = round((num_value - dollars) * 100)
    if cents == 100:
        dollars, cents = dollars + 1, 0
    return {
        "readable": f"${dollars}.{cents:02d}",
        "complete": f"${num_value:.6f}",
        "raw": num_value,
    }


def _format_count(value: int) -> str:
    return f"{value:,}"


async def openrouter_usage(
    api_key: str | None, *, transport: httpx.AsyncBaseTransport | None = None
) -> dict[str, Any]:
    if not api_key:
        return {"error": "OPENROUTER_API_KEY não configurada", "service": "OpenRouter"}
    try:
        async with httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport
        ) as client:
            resp = await client.get(
                f"{settings.OPENROUTER_BASE_URL}/key",
                headers={"Authorization": f"Bearer {api_key}"},
            )
            resp.raise_for_status()
            data = resp.json().get("data") or {}
    except (httpx.RequestError, httpx.HTTPStatusError) as e:
        logger.error("Failed to query OpenRouter usage: %s", e)
        return {"error": f"Erro ao consultar OpenRouter: {e}", "service": "OpenRouter"}

    limit = data.get("limit")
    limit_remaining = data.get("limit_remaining")
    return {
        "service": "OpenRouter",
        "usage": format_currency(data.get("usage", 0)),
        "limit": format_currency(limit) if limit else None,
        "limit_remaining": format_currency(limit_remaining) if limit_remaining else None,
        "has_limit": limit is not None,
        "success": True,
    }


async def elevenlabs_usage(
    api_key: str | None, *, transport: httpx.AsyncBaseTransport | None = None
) -> dict[str, Any]:
    if not api_key:
        return {"error": "ELEVEN_API_KEY não configurada", "service": "ElevenLabs"}
    try:
        data = await ElevenLabsClient(api_key, transport=transport).subscription()
    except ElevenLabsHttpError as e:
        logger.error("Failed to query ElevenLabs usage: %s", e)
        return {"error": f"Erro ao consultar ElevenLabs: {e}", "service": "ElevenLabs"}

    character_limit = int(data.get("character_limit") or 0)
    character_count = int(data.get("character_count") or 0)
    return {
        "service": "ElevenLabs",
        "tier": data.get("tier") or "Desconhecido",
        "character_limit": _format_count(character_limit),
        "character_count": _format_count(character_count),
        "character_remaining": _format_count(max(0, character_limit - character_count)),
        "success": True,
    }


async def collect_usage(
    openrouter_key: str | None,
    eleven_key: str | None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    open_router, eleven_labs = await asyncio.gather(
        openrouter_usage(openrouter_key, transport=transport),
        elevenlabs_usage(eleven_key, transport=transport),
    )
    return {"open_router": open_router, "eleven_labs": eleven_labs}
