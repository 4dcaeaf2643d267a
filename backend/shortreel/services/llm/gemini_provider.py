"""
Gemini LLM Provider

Implementation of LLMProvider for Google's Gemini models via google-genai.
The SDK is synchronous, so calls run in a worker thread.
"""

import asyncio
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .base import LLMConfig, LLMError, LLMProvider, LLMResponse, ProviderType, UsageStats


class GeminiProvider(LLMProvider):
    """Google Gemini LLM Provider"""

    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: str, default_model: str = "gemini-2.5-flash", client: Any = None):
        if not api_key and client is None:
            raise ValueError("Gemini provider requires an API key")
        self.default_model = default_model
        self.client = client or genai.Client(api_key=api_key)

    @staticmethod
    def _build_generation_config(config: LLMConfig) -> Optional[types.GenerateContentConfig]:
        kwargs: dict = {}
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.max_tokens:
            kwargs["max_output_tokens"] = config.max_tokens
        if config.json_output:
            kwargs["response_mime_type"] = "application/json"
        if config.system_instruction:
            kwargs["system_instruction"] = config.system_instruction
        return types.GenerateContentConfig(**kwargs) if kwargs else None

    @staticmethod
    def _extract_usage(response: Any) -> Optional[UsageStats]:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return None
        return UsageStats(
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )

    async def generate(self, prompt: str, config: Optional[LLMConfig] = None) -> LLMResponse:
        config = config or LLMConfig(model=self.default_model)
        request_kwargs: dict = {"model": config.model, "contents": prompt}
        generation_config = self._build_generation_config(config)
        if generation_config is not None:
            request_kwargs["config"] = generation_config

        try:
            response = await asyncio.to_thread(self.client.models.generate_content, **request_kwargs)
        except genai_errors.APIError as exc:
            raise LLMError(f"Gemini request failed: {exc.message or exc}", status_code=exc.code) from exc

        return LLMResponse(
            text=(response.text or "").strip(),
            model=config.model,
            provider=self.provider_type,
            usage=self._extract_usage(response),
        )

    async def ping(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.client.models.get, model=self.default_model),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise LLMError("Gemini did not respond in time") from exc
        except genai_errors.APIError as exc:
            raise LLMError(f"Gemini rejected the request: {exc.message or exc}", status_code=exc.code) from exc
