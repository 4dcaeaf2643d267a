"""
Tests for shortreel.services.pipeline.audio.tts_engine
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from edge_tts.exceptions import NoAudioReceived

from shortreel.core.exceptions import SynthesisFailed
from shortreel.services.pipeline.audio.tts_engine import EdgeTTSEngine


@pytest.fixture
def mock_communicate():
    with patch("shortreel.services.pipeline.audio.tts_engine.edge_tts.Communicate") as communicate:
        yield communicate


@pytest.mark.asyncio
class TestEdgeTTSEngine:

    async def test_synthesize_success(self, mock_communicate, tmp_path):
        output = tmp_path / "voice.mp3"

        async def save(path):
            output.write_bytes(b"mp3")

        mock_communicate.return_value = MagicMock(save=AsyncMock(side_effect=save))
        engine = EdgeTTSEngine(voice="en-US-AriaNeural")

        assert await engine.synthesize("Hello", output) == output
        mock_communicate.assert_called_once_with("Hello", "en-US-AriaNeural", rate="+12%", pitch="+0Hz")

    async def test_no_audio_is_empty(self, mock_communicate, tmp_path):
        mock_communicate.return_value = MagicMock(save=AsyncMock(side_effect=NoAudioReceived("nothing")))
        engine = EdgeTTSEngine(voice="en-US-AriaNeural")

        with pytest.raises(SynthesisFailed) as exc_info:
            await engine.synthesize("Hello", tmp_path / "voice.mp3")
        assert exc_info.value.reason == "empty"

    async def test_transport_failure_is_upstream(self, mock_communicate, tmp_path):
        mock_communicate.return_value = MagicMock(save=AsyncMock(side_effect=ConnectionResetError("reset")))
        engine = EdgeTTSEngine(voice="en-US-AriaNeural")

        with pytest.raises(SynthesisFailed) as exc_info:
            await engine.synthesize("Hello", tmp_path / "voice.mp3")
        assert exc_info.value.reason == "upstream"

    async def test_zero_byte_file_is_empty(self, mock_communicate, tmp_path):
        output = tmp_path / "voice.mp3"

        async def save(path):
            output.write_bytes(b"")

        mock_communicate.return_value = MagicMock(save=AsyncMock(side_effect=save))
        with pytest.raises(SynthesisFailed) as exc_info:
            await EdgeTTSEngine(voice="en-US-AriaNeural").synthesize("Hello", output)
        assert exc_info.value.reason == "empty"

    async def test_check_known_and_unknown_voice(self):
        voices = [{"ShortName": "en-US-AriaNeural"}]
        with patch(
            "shortreel.services.pipeline.audio.tts_engine.edge_tts.list_voices",
            new=AsyncMock(return_value=voices),
        ):
            assert await EdgeTTSEngine(voice="en-US-AriaNeural").check(timeout=1) == "voice en-US-AriaNeural"
            with pytest.raises(SynthesisFailed):
                await EdgeTTSEngine(voice="xx-Nobody").check(timeout=1)
