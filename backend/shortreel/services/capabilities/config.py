"""
Capability configuration snapshot.

The only place adapter credentials are read from the environment. A fresh
snapshot is taken per job so changed credentials apply without a restart.
"""

import os
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class CapabilityConfig:
    # Script generation
    llm_provider: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    ollama_host: Optional[str] = None
    ollama_model: str = "gemma3:12b"

    # Voice, in priority order
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"
    elevenlabs_model: str = "eleven_multilingual_v2"
    google_tts_key: Optional[str] = None
    google_tts_language: str = "en-US"
    google_tts_voice: Optional[str] = None
    gemini_tts_voice: Optional[str] = None
    gemini_tts_model: str = "gemini-2.5-flash-preview-tts"
    edge_tts_voice: Optional[str] = None

    # Image search, in priority order
    unsplash_access_key: Optional[str] = None
    pexels_api_key: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CapabilityConfig":
        env = os.environ if environ is None else environ
        defaults = cls()

        def read(name: str, default: Optional[str] = None) -> Optional[str]:
            return _clean(env.get(name)) or default

        return cls(
            llm_provider=(read("LLM_PROVIDER") or "").lower() or None,
            gemini_api_key=read("GEMINI_API_KEY"),
            gemini_model=read("GEMINI_MODEL", defaults.gemini_model),
            ollama_host=read("OLLAMA_HOST"),
            ollama_model=read("OLLAMA_MODEL", defaults.ollama_model),
            elevenlabs_api_key=read("ELEVENLABS_API_KEY"),
            elevenlabs_voice_id=read("ELEVENLABS_VOICE_ID", defaults.elevenlabs_voice_id),
            elevenlabs_model=read("ELEVENLABS_MODEL", defaults.elevenlabs_model),
            google_tts_key=read("GOOGLE_CLOUD_TTS_KEY"),
            google_tts_language=read("GOOGLE_TTS_LANGUAGE", defaults.google_tts_language),
            google_tts_voice=read("GOOGLE_TTS_VOICE"),
            gemini_tts_voice=read("GEMINI_TTS_VOICE"),
            gemini_tts_model=read("GEMINI_TTS_MODEL", defaults.gemini_tts_model),
            edge_tts_voice=read("EDGE_TTS_VOICE"),
            unsplash_access_key=read("UNSPLASH_ACCESS_KEY"),
            pexels_api_key=read("PEXELS_API_KEY"),
        )

    # Presence checks

    @property
    def has_elevenlabs(self) -> bool:
        return bool(self.elevenlabs_api_key)

    @property
    def has_google_tts(self) -> bool:
        return bool(self.google_tts_key)

    @property
    def has_gemini_tts(self) -> bool:
        # Shares the script key, so a voice name must be chosen as well
        return bool(self.gemini_tts_voice and self.gemini_api_key)

    @property
    def has_edge_tts(self) -> bool:
        return bool(self.edge_tts_voice)

    @property
    def has_unsplash(self) -> bool:
        return bool(self.unsplash_access_key)

    @property
    def has_pexels(self) -> bool:
        return bool(self.pexels_api_key)

    def describe(self) -> Dict[str, bool]:
        """Which credentials are present, without their values."""
        return {
            f.name: getattr(self, f.name) is not None
            for f in fields(self)
            if f.name.endswith(("_key", "_host", "_voice"))
        }
