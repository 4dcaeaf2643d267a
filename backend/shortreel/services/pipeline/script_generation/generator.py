"""
Script generator

Turns (topic, duration) into a ScriptData through an LLM provider. Every
failure, upstream or parsing, surfaces as GenerationFailed.
"""

import re
from typing import List

from shortreel.core.exceptions import GenerationFailed
from shortreel.core.logging import get_logger
from shortreel.models.script import Caption, ScriptData
from shortreel.services.infrastructure.parsing.json_parser import parse_json_object
from shortreel.services.llm.base import LLMConfig, LLMError, LLMProvider

from .prompts import SYSTEM_INSTRUCTION, build_script_prompt

logger = get_logger(__name__, component="script_generator")

_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


def fallback_captions(text: str, duration: float) -> List[Caption]:
    """Evenly timed captions, one per sentence, spanning ``duration``."""
    sentences = [s.strip() for s in _SENTENCE_RE.split(text or "") if s.strip()]
    if not sentences:
        return []
    step = duration / len(sentences)
    return [
        Caption(text=sentence, start_time=round(i * step, 3), duration=round(step, 3))
        for i, sentence in enumerate(sentences)
    ]


class LLMScriptGenerator:
    """Script generation backed by any LLMProvider."""

    def __init__(self, provider: LLMProvider, temperature: float = 0.9):
        self.provider = provider
        self.temperature = temperature

    @property
    def name(self) -> str:
        return self.provider.name

    async def generate(self, topic: str, duration_seconds: int) -> ScriptData:
        config = LLMConfig(
            model=self.provider.default_model,
            temperature=self.temperature,
            json_output=True,
            system_instruction=SYSTEM_INSTRUCTION,
        )
        try:
            response = await self.provider.generate(build_script_prompt(topic, duration_seconds), config)
        except LLMError as exc:
            raise GenerationFailed(f"Failed to generate script: {exc}") from exc

        try:
            payload = parse_json_object(response.text)
        except ValueError as exc:
            logger.warning("Unparsable script response", extra={"preview": response.text[:200]})
            raise GenerationFailed("Failed to generate script: response was not valid JSON") from exc

        try:
            script = ScriptData.from_dict(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("Malformed script response", extra={"error": str(exc)})
            raise GenerationFailed(f"Failed to generate script: malformed field ({exc})") from exc
        if not script.hook and not script.body:
            raise GenerationFailed("Failed to generate script: response had no narration")

        if not script.captions:
            script.captions = fallback_captions(script.script, duration_seconds)
        if not script.keywords:
            script.keywords = [topic]

        logger.info(
            "Script generated",
            extra={
                "provider": self.provider.name,
                "captions": len(script.captions),
                "keywords": len(script.keywords),
            },
        )
        return script
