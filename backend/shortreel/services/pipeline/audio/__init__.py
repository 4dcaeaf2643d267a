"""Audio generation - text-to-speech adapters in priority order."""

from .base import VoiceSynthesizer, reason_for_status
from .elevenlabs import ElevenLabsSynthesizer
from .google_tts import GoogleTTSSynthesizer
from .gemini_tts_engine import GeminiTTSEngine
from .tts_engine import EdgeTTSEngine

__all__ = [
    "VoiceSynthesizer",
    "reason_for_status",
    "ElevenLabsSynthesizer",
    "GoogleTTSSynthesizer",
    "GeminiTTSEngine",
    "EdgeTTSEngine",
]
