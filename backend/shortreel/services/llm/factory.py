"""
LLM Provider Factory

Chooses the provider for a capability snapshot.
"""

from typing import Optional

from shortreel.services.capabilities.config import CapabilityConfig

from .base import LLMProvider, ProviderType
from .gemini_provider import GeminiProvider
from .ollama_provider import OllamaProvider


def resolve_provider_type(config: CapabilityConfig) -> Optional[ProviderType]:
    """
    Pick the provider type, or None when nothing is configured.

    ``LLM_PROVIDER`` wins when set; otherwise a Gemini key selects Gemini and
    an explicit ``OLLAMA_HOST`` selects Ollama.
    """
    if config.llm_provider == ProviderType.OLLAMA.value:
        return ProviderType.OLLAMA
    if config.llm_provider == ProviderType.GEMINI.value:
        return ProviderType.GEMINI if config.gemini_api_key else None
    if config.gemini_api_key:
        return ProviderType.GEMINI
    if config.ollama_host:
        return ProviderType.OLLAMA
    return None


def create_llm_provider(config: CapabilityConfig) -> Optional[LLMProvider]:
    provider_type = resolve_provider_type(config)
    if provider_type is ProviderType.GEMINI:
        return GeminiProvider(api_key=config.gemini_api_key, default_model=config.gemini_model)
    if provider_type is ProviderType.OLLAMA:
        return OllamaProvider(
            base_url=config.ollama_host or "http://localhost:11434",
            default_model=config.ollama_model,
        )
    return None
