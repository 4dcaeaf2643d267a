"""
Google Cloud Text-to-Speech (REST, API key auth).
"""

import base64
import binascii
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from shortreel.core.exceptions import SynthesisFailed
from shortreel.core.logging import get_logger

from .base import VoiceSynthesizer, synthesis_error, write_audio

logger = get_logger(__name__, component="google_tts")


class GoogleTTSSynthesizer(VoiceSynthesizer):
    name = "google_tts"
    file_extension = "mp3"

    BASE_URL = "https://texttospeech.googleapis.com"

    def __init__(
        self,
        api_key: str,
        language_code: str = "en-US",
        voice_name: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.language_code = language_code
        self.voice_name = voice_name
        self.timeout = timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.BASE_URL,
            params={"key": self.api_key},
            timeout=timeout,
            transport=self._transport,
        )

    def _voice(self) -> Dict[str, Any]:
        voice: Dict[str, Any] = {"languageCode": self.language_code, "ssmlGender": "NEUTRAL"}
        if self.voice_name:
            voice["name"] = self.voice_name
        return voice

    async def synthesize(self, text: str, output_path: Path) -> Path:
        payload = {
            "input": {"text": text},
            "voice": self._voice(),
            "audioConfig": {"audioEncoding": "MP3"},
        }
        try:
            async with self._client(self.timeout) as client:
                response = await client.post("/v1/text:synthesize", json=payload)
                response.raise_for_status()
                content = response.json().get("audioContent") or ""
        except httpx.HTTPError as exc:
            raise synthesis_error(exc, "Google TTS") from exc
        except ValueError as exc:
            raise SynthesisFailed("upstream", "Google TTS returned malformed JSON") from exc

        try:
            audio = base64.b64decode(content)
        except (binascii.Error, ValueError) as exc:
            raise SynthesisFailed("upstream", "Google TTS returned undecodable audio") from exc

        path = write_audio(output_path, audio, "Google TTS")
        logger.info("Voice synthesized", extra={"provider": self.name, "chars": len(text)})
        return path

    async def check(self, timeout: float) -> Optional[str]:
        try:
            async with self._client(timeout) as client:
                response = await client.get("/v1/voices", params={"languageCode": self.language_code})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise synthesis_error(exc, "Google TTS") from exc

        voices = response.json().get("voices") or []
        return f"{len(voices)} voices for {self.language_code}"
