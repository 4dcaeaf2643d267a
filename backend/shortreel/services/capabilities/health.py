"""
Capability health checks.

Each probe reports ``not_configured``, ``working`` or ``error`` and never
raises. Probes run with a short timeout and never synthesize or render.
"""

import asyncio
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Dict, Optional

from shortreel.config import HEALTH_CHECK_TIMEOUT_SECONDS
from shortreel.core.exceptions import ImageSearchFailed, SynthesisFailed
from shortreel.core.logging import get_logger
from shortreel.services.llm.base import LLMError
from shortreel.services.llm.factory import create_llm_provider

from .config import CapabilityConfig
from .selector import select_image_sources, select_voice_synthesizers

logger = get_logger(__name__, component="health")

# Capability key -> display name
CAPABILITIES = {
    "llm": "Script generation (LLM)",
    "elevenlabs": "ElevenLabs",
    "google_tts": "Google Cloud TTS",
    "gemini_tts": "Gemini TTS",
    "edge_tts": "Edge TTS",
    "unsplash": "Unsplash",
    "pexels": "Pexels",
}

Probe = Callable[[float], Awaitable[Optional[str]]]


def _result(capability: str, status: str, message: str, error_code: Any = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "status": status,
        "service": CAPABILITIES[capability],
        "message": message,
        "configured": status != "not_configured",
    }
    if error_code is not None:
        result["error_code"] = error_code
    return result


def _find_probe(capability: str, config: CapabilityConfig) -> Optional[Probe]:
    if capability == "llm":
        provider = create_llm_provider(config)
        return provider.ping if provider is not None else None
    for adapter in select_voice_synthesizers(config):
        if adapter.name == capability:
            return adapter.check
    for source in select_image_sources(config):
        if source.name == capability:
            return source.check
    return None


async def check_capability(
    capability: str,
    config: Optional[CapabilityConfig] = None,
    timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """
    Probe one capability.

    Raises:
        KeyError: If ``capability`` is not a known key
    """
    if capability not in CAPABILITIES:
        raise KeyError(capability)

    config = config or CapabilityConfig.from_env()
    probe = _find_probe(capability, config)
    if probe is None:
        return _result(capability, "not_configured", "No credentials configured")

    try:
        detail = await asyncio.wait_for(probe(timeout), timeout=timeout + 1.0)
    except asyncio.TimeoutError:
        return _result(capability, "error", "Timed out", "timeout")
    except LLMError as exc:
        return _result(capability, "error", str(exc), exc.status_code)
    except SynthesisFailed as exc:
        return _result(capability, "error", str(exc), exc.reason)
    except ImageSearchFailed as exc:
        return _result(capability, "error", str(exc))
    except Exception as exc:
        logger.warning("Health probe raised unexpectedly", extra={"capability": capability, "error": str(exc)})
        return _result(capability, "error", f"Unexpected error: {exc}")

    message = "Credentials are valid and working"
    if detail:
        message = f"{message} ({detail})"
    return _result(capability, "working", message)


async def check_all(config: Optional[CapabilityConfig] = None) -> Dict[str, Any]:
    config = config or CapabilityConfig.from_env()
    names = list(CAPABILITIES)
    results = await asyncio.gather(*(check_capability(name, config) for name in names))
    apis = dict(zip(names, results))
    statuses = [r["status"] for r in results]
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "apis": apis,
        "summary": {
            "total": len(statuses),
            "working": statuses.count("working"),
            "error": statuses.count("error"),
            "not_configured": statuses.count("not_configured"),
        },
    }
