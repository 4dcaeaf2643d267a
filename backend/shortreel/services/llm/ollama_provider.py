"""
Ollama LLM Provider

Implementation of LLMProvider for local models served by Ollama.
"""

from typing import Any, Dict, Optional

import httpx

from .base import LLMConfig, LLMError, LLMProvider, LLMResponse, ProviderType, UsageStats


class OllamaProvider(LLMProvider):
    """Ollama LLM Provider for local models"""

    provider_type = ProviderType.OLLAMA

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        default_model: str = "gemma3:12b",
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.timeout = timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self._transport)

    @staticmethod
    def _build_options(config: LLMConfig) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if config.temperature is not None:
            options["temperature"] = config.temperature
        if config.max_tokens:
            options["num_predict"] = config.max_tokens
        options.update(config.extra_options)
        return options

    async def generate(self, prompt: str, config: Optional[LLMConfig] = None) -> LLMResponse:
        config = config or LLMConfig(model=self.default_model)
        payload: Dict[str, Any] = {
            "model": config.model,
            "prompt": prompt,
            "stream": False,
        }
        options = self._build_options(config)
        if options:
            payload["options"] = options
        if config.json_output:
            payload["format"] = "json"
        if config.system_instruction:
            payload["system"] = config.system_instruction

        try:
            async with self._client(self.timeout) as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                f"Ollama returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(f"Ollama request failed: {exc}") from exc

        usage = None
        if "prompt_eval_count" in data or "eval_count" in data:
            usage = UsageStats(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            )
        return LLMResponse(
            text=str(data.get("response", "")).strip(),
            model=config.model,
            provider=self.provider_type,
            usage=usage,
        )

    async def ping(self, timeout: float) -> None:
        try:
            async with self._client(timeout) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                f"Ollama returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise LLMError(f"Ollama is unreachable: {exc}") from exc
