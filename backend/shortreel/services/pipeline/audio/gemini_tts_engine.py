"""
Gemini TTS Engine - Text-to-Speech using Gemini's native audio output

The API returns raw 24 kHz 16-bit mono PCM, written here as WAV. Calls are
paced by a sliding-window limiter to stay under the free-tier RPM.
"""

import asyncio
import os
import time
import wave
from pathlib import Path
from typing import Any, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from shortreel.core.exceptions import SynthesisFailed
from shortreel.core.logging import get_logger

from .base import VoiceSynthesizer, reason_for_status

logger = get_logger(__name__, component="gemini_tts")

DEFAULT_GEMINI_TTS_MODEL = "gemini-2.5-flash-preview-tts"


class _RateLimiter:
    """At most ``max_rpm`` acquisitions in any rolling 60-second window."""

    def __init__(self, max_rpm: int = 8):
        self.max_rpm = max_rpm
        self._timestamps: List[float] = []
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            self._timestamps = [t for t in self._timestamps if now - t < 60]
            if len(self._timestamps) >= self.max_rpm:
                wait = 60.0 - (now - self._timestamps[0]) + 0.2
                if wait > 0:
                    logger.info("Gemini TTS rate limit reached, waiting", extra={"wait_seconds": round(wait, 1)})
                    await asyncio.sleep(wait)
                    now = time.monotonic()
                    self._timestamps = [t for t in self._timestamps if now - t < 60]
            self._timestamps.append(time.monotonic())


# Shared across instances; the quota is per API key, not per job
_rate_limiter = _RateLimiter(max_rpm=int(os.getenv("GEMINI_TTS_RPM", "8")))


class GeminiTTSEngine(VoiceSynthesizer):
    name = "gemini_tts"
    file_extension = "wav"

    def __init__(self, api_key: str, voice: str, model: str = DEFAULT_GEMINI_TTS_MODEL, client: Any = None):
        self.voice = voice
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    def _speech_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.voice)
                )
            ),
        )

    @staticmethod
    def _extract_pcm(response: Any) -> Optional[bytes]:
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    return inline.data
        return None

    @staticmethod
    def _write_wav(path: Path, pcm: bytes, channels: int = 1, rate: int = 24000, sample_width: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with wave.open(str(path), "wb") as wf:
            wf.setnchannels(channels)
            wf.setsampwidth(sample_width)
            wf.setframerate(rate)
            wf.writeframes(pcm)

    async def synthesize(self, text: str, output_path: Path) -> Path:
        await _rate_limiter.acquire()
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=text,
                config=self._speech_config(),
            )
        except genai_errors.APIError as exc:
            reason = reason_for_status(exc.code or 0, str(exc.message or ""))
            raise SynthesisFailed(reason, f"Gemini TTS returned {exc.code} ({reason})") from exc
        except httpx.HTTPError as exc:
            raise SynthesisFailed("upstream", f"Gemini TTS request failed: {exc}") from exc

        pcm = self._extract_pcm(response)
        if not pcm:
            raise SynthesisFailed("empty", "Gemini TTS returned no audio")

        self._write_wav(output_path, pcm)
        logger.info("Voice synthesized", extra={"provider": self.name, "chars": len(text), "voice": self.voice})
        return output_path

    async def check(self, timeout: float) -> Optional[str]:
        try:
            await asyncio.wait_for(asyncio.to_thread(self.client.models.get, model=self.model), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise SynthesisFailed("timeout", "Gemini TTS did not respond in time") from exc
        except genai_errors.APIError as exc:
            reason = reason_for_status(exc.code or 0, str(exc.message or ""))
            raise SynthesisFailed(reason, f"Gemini TTS returned {exc.code} ({reason})") from exc
        return f"voice {self.voice}"
