"""
HTTP client for the ElevenLabs API.

- `ElevenLabsClient.synthesize(text)` returns MP3 bytes for one narration.
- `ElevenLabsClient.subscription()` returns the raw subscription/usage JSON.
- Any HTTP or network failure surfaces as `ElevenLabsHttpError`.
"""
import logging
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {
    "stability": 0.3,
    "similarity_boost": 0.85,
    "use_speaker_boost": True,
}
VOICE_SPEED = 0.9


class ElevenLabsHttpError(RuntimeError):
    """HTTP error while talking to ElevenLabs."""


class ElevenLabsClient:
    def __init__(
        self,
        api_key: str,
        *,
        voice_id: str | None = None,
        model_id: str | None = None,
        base_url: str | None = None,
        timeout_s: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.voice_id = voice_id
        self.model_id = model_id or settings.ELEVEN_MODEL_DEFAULT
        self.base_url = (base_url or settings.ELEVENLABS_BASE_URL).rstrip("/")
        self._headers = {"xi-api-key": api_key}
        self._timeout_s = timeout_s
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=self._timeout_s,
            transport=self._transport,
        )

    async def synthesize(self, text: str) -> bytes:
        if not self.voice_id:
            raise ElevenLabsHttpError("VOICE_ID não configurado")
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": VOICE_SETTINGS,
            "voice_speed": VOICE_SPEED,
        }
        try:
            async with self._client() as client:
                resp = await client.post(
                    f"/v1/text-to-speech/{self.voice_id}",
                    json=payload,
                    headers={"Accept": "audio/mpeg"},
                )
                resp.raise_for_status()
                return resp.content
        except (httpx.RequestError, httpx.HTTPStatusError) as e:
            raise ElevenLabsHttpError(f"ElevenLabs request failed: {e}") from e

    async def subscription(self) -> dict[str, Any]:
        try:
            async with self._client() as client:
                resp = await client.get("/v1/user/subscription")
                resp.raise_for_status()
                return resp.json()
        except (httpx.RequestError, httpx.HTTPStatusError) as e:
            raise ElevenLabsHttpError(f"ElevenLabs request failed: {e}") from e
