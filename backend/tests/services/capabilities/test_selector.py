"""
Tests for capability configuration and adapter selection.
"""

from shortreel.services.capabilities.config import CapabilityConfig
from shortreel.services.capabilities.selector import (
    build_image_search,
    select_image_sources,
    select_script_generator,
    select_voice_synthesizers,
)


class TestCapabilityConfig:

    def test_from_env_strips_blank_values(self):
        config = CapabilityConfig.from_env({
            "GEMINI_API_KEY": "  key ",
            "PEXELS_API_KEY": "   ",
            "LLM_PROVIDER": "Ollama",
        })
        assert config.gemini_api_key == "key"
        assert config.pexels_api_key is None
        assert config.llm_provider == "ollama"
        assert config.gemini_model == "gemini-2.5-flash"

    def test_gemini_tts_needs_voice_and_key(self):
        assert not CapabilityConfig(gemini_tts_voice="Kore").has_gemini_tts
        assert not CapabilityConfig(gemini_api_key="k").has_gemini_tts
        assert CapabilityConfig(gemini_api_key="k", gemini_tts_voice="Kore").has_gemini_tts

    def test_describe_hides_values(self):
        described = CapabilityConfig(unsplash_access_key="secret").describe()
        assert described["unsplash_access_key"] is True
        assert described["pexels_api_key"] is False
        assert "secret" not in str(described)


class TestSelection:

    def test_nothing_configured(self):
        config = CapabilityConfig()
        assert select_script_generator(config) is None
        assert select_voice_synthesizers(config) == []
        assert select_image_sources(config) == []
        assert build_image_search(config).sources == []

    def test_voice_priority_order(self):
        config = CapabilityConfig(
            elevenlabs_api_key="e",
            google_tts_key="g",
            gemini_api_key="k",
            gemini_tts_voice="Kore",
            edge_tts_voice="en-US-AriaNeural",
        )
        names = [adapter.name for adapter in select_voice_synthesizers(config)]
        assert names == ["elevenlabs", "google_tts", "gemini_tts", "edge_tts"]

    def test_only_configured_voices(self):
        config = CapabilityConfig(edge_tts_voice="en-US-AriaNeural")
        assert [a.name for a in select_voice_synthesizers(config)] == ["edge_tts"]

    def test_image_priority_order(self):
        config = CapabilityConfig(unsplash_access_key="u", pexels_api_key="p")
        assert [s.name for s in select_image_sources(config)] == ["unsplash", "pexels"]
        assert build_image_search(config).name == "unsplash+pexels"

    def test_script_generator_from_gemini_key(self):
        generator = select_script_generator(CapabilityConfig(gemini_api_key="k"))
        assert generator is not None
        assert generator.name == "gemini"
