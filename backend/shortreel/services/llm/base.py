"""
Base classes for LLM providers

Defines the interface the script generator talks to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ProviderType(str, Enum):
    """Supported LLM providers"""
    GEMINI = "gemini"
    OLLAMA = "ollama"


class LLMError(Exception):
    """Provider call failed. ``status_code`` is set for HTTP-level failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LLMConfig:
    """Configuration for an LLM request"""
    model: str
    temperature: float = 0.8
    max_tokens: Optional[int] = None
    json_output: bool = False
    system_instruction: Optional[str] = None
    extra_options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UsageStats:
    """Token usage statistics"""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """Unified response from any LLM provider"""
    text: str
    model: str
    provider: ProviderType
    usage: Optional[UsageStats] = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    provider_type: ProviderType
    default_model: str

    @abstractmethod
    async def generate(self, prompt: str, config: Optional[LLMConfig] = None) -> LLMResponse:
        """Generate a completion.

        Raises:
            LLMError: On any transport or upstream failure
        """

    @abstractmethod
    async def ping(self, timeout: float) -> None:
        """Cheap reachability/credential probe for health checks.

        Raises:
            LLMError: If the provider cannot be used
        """

    @property
    def name(self) -> str:
        return self.provider_type.value
