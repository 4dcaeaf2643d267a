"""
Capability selector.

Pure functions from a CapabilityConfig to ordered candidate adapters. Nothing
is cached; optional capabilities with no credentials yield an empty list.
"""

from typing import List, Optional

from shortreel.config import IMAGE_TIMEOUT_SECONDS, IMAGES_PER_KEYWORD, VOICE_TIMEOUT_SECONDS
from shortreel.services.llm.factory import create_llm_provider
from shortreel.services.pipeline.audio.base import VoiceSynthesizer
from shortreel.services.pipeline.audio.elevenlabs import ElevenLabsSynthesizer
from shortreel.services.pipeline.audio.gemini_tts_engine import GeminiTTSEngine
from shortreel.services.pipeline.audio.google_tts import GoogleTTSSynthesizer
from shortreel.services.pipeline.audio.tts_engine import EdgeTTSEngine
from shortreel.services.pipeline.images.base import ImageSource
from shortreel.services.pipeline.images.composite import CompositeImageSearch
from shortreel.services.pipeline.images.pexels import PexelsSource
from shortreel.services.pipeline.images.unsplash import UnsplashSource
from shortreel.services.pipeline.script_generation.generator import LLMScriptGenerator

from .config import CapabilityConfig


def select_script_generator(config: CapabilityConfig) -> Optional[LLMScriptGenerator]:
    provider = create_llm_provider(config)
    return LLMScriptGenerator(provider) if provider is not None else None


def select_voice_synthesizers(config: CapabilityConfig) -> List[VoiceSynthesizer]:
    """ElevenLabs, Google Cloud TTS, Gemini TTS, Edge TTS; configured ones only."""
    candidates: List[VoiceSynthesizer] = []
    if config.has_elevenlabs:
        candidates.append(
            ElevenLabsSynthesizer(
                api_key=config.elevenlabs_api_key,
                voice_id=config.elevenlabs_voice_id,
                model_id=config.elevenlabs_model,
                timeout=VOICE_TIMEOUT_SECONDS,
            )
        )
    if config.has_google_tts:
        candidates.append(
            GoogleTTSSynthesizer(
                api_key=config.google_tts_key,
                language_code=config.google_tts_language,
                voice_name=config.google_tts_voice,
                timeout=VOICE_TIMEOUT_SECONDS,
            )
        )
    if config.has_gemini_tts:
        candidates.append(
            GeminiTTSEngine(
                api_key=config.gemini_api_key,
                voice=config.gemini_tts_voice,
                model=config.gemini_tts_model,
            )
        )
    if config.has_edge_tts:
        candidates.append(EdgeTTSEngine(voice=config.edge_tts_voice))
    return candidates


def select_image_sources(config: CapabilityConfig) -> List[ImageSource]:
    """Unsplash, then Pexels; configured ones only."""
    sources: List[ImageSource] = []
    if config.has_unsplash:
        sources.append(
            UnsplashSource(
                access_key=config.unsplash_access_key,
                per_keyword=IMAGES_PER_KEYWORD,
                timeout=IMAGE_TIMEOUT_SECONDS,
            )
        )
    if config.has_pexels:
        sources.append(
            PexelsSource(
                api_key=config.pexels_api_key,
                per_keyword=IMAGES_PER_KEYWORD,
                timeout=IMAGE_TIMEOUT_SECONDS,
            )
        )
    return sources


def build_image_search(config: CapabilityConfig) -> CompositeImageSearch:
    return CompositeImageSearch(select_image_sources(config))
