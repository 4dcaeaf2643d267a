"""
TTS Engine - Text-to-Speech using Edge TTS (free, no credential)
"""

import asyncio
from pathlib import Path
from typing import Optional

import edge_tts
from edge_tts.exceptions import EdgeTTSException, NoAudioReceived

from shortreel.core.exceptions import SynthesisFailed
from shortreel.core.logging import get_logger

from .base import VoiceSynthesizer

logger = get_logger(__name__, component="edge_tts")


class EdgeTTSEngine(VoiceSynthesizer):
    """Text-to-Speech engine using Microsoft Edge TTS"""

    name = "edge_tts"
    file_extension = "mp3"

    def __init__(self, voice: str, rate: str = "+12%", pitch: str = "+0Hz"):
        self.voice = voice
        self.rate = rate
        self.pitch = pitch

    async def synthesize(self, text: str, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        communicate = edge_tts.Communicate(text, self.voice, rate=self.rate, pitch=self.pitch)
        try:
            await communicate.save(str(output_path))
        except NoAudioReceived as exc:
            raise SynthesisFailed("empty", "Edge TTS returned no audio") from exc
        except Exception as exc:
            raise SynthesisFailed("upstream", f"Edge TTS failed: {exc}") from exc

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise SynthesisFailed("empty", "Edge TTS wrote an empty file")

        logger.info("Voice synthesized", extra={"provider": self.name, "chars": len(text), "voice": self.voice})
        return output_path

    async def check(self, timeout: float) -> Optional[str]:
        try:
            voices = await asyncio.wait_for(edge_tts.list_voices(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise SynthesisFailed("timeout", "Edge TTS voice list timed out") from exc
        except (EdgeTTSException, OSError) as exc:
            raise SynthesisFailed("upstream", f"Edge TTS unreachable: {exc}") from exc

        if not any(v.get("ShortName") == self.voice for v in voices):
            raise SynthesisFailed("auth", f"Unknown Edge TTS voice '{self.voice}'")
        return f"voice {self.voice}"
