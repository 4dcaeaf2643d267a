"""Tests for shortreel.services.pipeline.audio.gemini_tts_engine."""

import time
import wave
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors as genai_errors

from shortreel.core.exceptions import SynthesisFailed
from shortreel.services.pipeline.audio.gemini_tts_engine import GeminiTTSEngine, _RateLimiter


def _response(pcm: bytes):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=pcm))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


@pytest.fixture(autouse=True)
def no_rate_limit():
    with patch(
        "shortreel.services.pipeline.audio.gemini_tts_engine._rate_limiter",
        AsyncMock(acquire=AsyncMock()),
    ):
        yield


@pytest.mark.asyncio
class TestRateLimiter:
    async def test_acquire_under_limit(self):
        limiter = _RateLimiter(max_rpm=5)
        for _ in range(5):
            await limiter.acquire()

    async def test_acquire_blocks_when_full(self):
        limiter = _RateLimiter(max_rpm=2)
        limiter._timestamps = [time.monotonic() - 59.5, time.monotonic() - 59.5]
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await limiter.acquire()
            mock_sleep.assert_called_once()


@pytest.mark.asyncio
class TestGeminiTTSEngine:

    async def test_synthesize_writes_wav(self, tmp_path):
        client = MagicMock()
        client.models.generate_content.return_value = _response(b"\x00\x00" * 2400)
        engine = GeminiTTSEngine(api_key="k", voice="Kore", client=client)

        path = await engine.synthesize("Hello world", tmp_path / "voice.wav")

        with wave.open(str(path), "rb") as wf:
            assert wf.getframerate() == 24000
            assert wf.getnframes() == 2400
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["contents"] == "Hello world"
        assert kwargs["config"].speech_config.voice_config.prebuilt_voice_config.voice_name == "Kore"

    async def test_empty_audio(self, tmp_path):
        client = MagicMock()
        client.models.generate_content.return_value = SimpleNamespace(candidates=[])
        engine = GeminiTTSEngine(api_key="k", voice="Kore", client=client)

        with pytest.raises(SynthesisFailed) as exc_info:
            await engine.synthesize("Hello", tmp_path / "voice.wav")
        assert exc_info.value.reason == "empty"

    async def test_rate_limited_api_error(self, tmp_path):
        client = MagicMock()
        client.models.generate_content.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "Too many requests", "status": "RESOURCE_EXHAUSTED"}}
        )
        engine = GeminiTTSEngine(api_key="k", voice="Kore", client=client)

        with pytest.raises(SynthesisFailed) as exc_info:
            await engine.synthesize("Hello", tmp_path / "voice.wav")
        assert exc_info.value.reason == "rate_limit"

    async def test_check_uses_model_lookup(self):
        client = MagicMock()
        engine = GeminiTTSEngine(api_key="k", voice="Kore", client=client)

        assert await engine.check(timeout=1) == "voice Kore"
        client.models.get.assert_called_once_with(model=engine.model)
