"""
LLM Provider Abstraction Layer

    from shortreel.services.llm import create_llm_provider, LLMConfig

    provider = create_llm_provider(CapabilityConfig.from_env())
    response = await provider.generate(prompt, LLMConfig(model=provider.default_model))
"""

from .base import LLMConfig, LLMError, LLMProvider, LLMResponse, ProviderType, UsageStats
from .factory import create_llm_provider, resolve_provider_type
from .gemini_provider import GeminiProvider
from .ollama_provider import OllamaProvider

__all__ = [
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "UsageStats",
    "create_llm_provider",
    "resolve_provider_type",
    "GeminiProvider",
    "OllamaProvider",
]
