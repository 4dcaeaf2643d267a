"""
ElevenLabs voice synthesis.
"""

from pathlib import Path
from typing import Optional

import httpx

from shortreel.core.logging import get_logger

from .base import VoiceSynthesizer, synthesis_error, write_audio

logger = get_logger(__name__, component="elevenlabs")


class ElevenLabsSynthesizer(VoiceSynthesizer):
    name = "elevenlabs"
    file_extension = "mp3"

    BASE_URL = "https://api.elevenlabs.io"

    def __init__(
        self,
        api_key: str,
        voice_id: str = "21m00Tcm4TlvDq8ikWAM",
        model_id: str = "eleven_multilingual_v2",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.timeout = timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"xi-api-key": self.api_key},
            timeout=timeout,
            transport=self._transport,
        )

    async def synthesize(self, text: str, output_path: Path) -> Path:
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }
        try:
            async with self._client(self.timeout) as client:
                response = await client.post(
                    f"/v1/text-to-speech/{self.voice_id}",
                    json=payload,
                    headers={"Accept": "audio/mpeg"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise synthesis_error(exc, "ElevenLabs") from exc

        path = write_audio(output_path, response.content, "ElevenLabs")
        logger.info("Voice synthesized", extra={"provider": self.name, "chars": len(text)})
        return path

    async def check(self, timeout: float) -> Optional[str]:
        try:
            async with self._client(timeout) as client:
                response = await client.get("/v1/user")
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise synthesis_error(exc, "ElevenLabs") from exc

        subscription = response.json().get("subscription") or {}
        used = subscription.get("character_count")
        limit = subscription.get("character_limit")
        if used is not None and limit is not None:
            return f"{used}/{limit} characters used"
        return None
