"""Script generation - LLM-backed narration scripts."""

from .generator import LLMScriptGenerator, fallback_captions

__all__ = ["LLMScriptGenerator", "fallback_captions"]
