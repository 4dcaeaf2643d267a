"""
Content use cases - script-only generation and image search for selection.

Both back the "create with selected images" flow: the client previews a
script and picks images, then submits them as job options.
"""

import asyncio
from typing import Any, Callable, Dict

from shortreel.config import MAX_SELECTION_IMAGES, SCRIPT_TIMEOUT_SECONDS
from shortreel.core.exceptions import (
    GenerationFailed,
    ImageSearchFailed,
    ServiceUnavailableError,
    ValidationError,
)
from shortreel.core.logging import get_logger
from shortreel.core.validation import validate_duration, validate_topic
from shortreel.models.videos import GenerateScriptRequest, SearchImagesRequest
from shortreel.services.capabilities.config import CapabilityConfig
from shortreel.services.capabilities.selector import build_image_search, select_script_generator

from .base import UseCase

logger = get_logger(__name__, component="content")

ConfigFactory = Callable[[], CapabilityConfig]


class GenerateScriptUseCase(UseCase[GenerateScriptRequest, Dict[str, Any]]):
    def __init__(self, config_factory: ConfigFactory = CapabilityConfig.from_env, timeout: float = SCRIPT_TIMEOUT_SECONDS):
        self.config_factory = config_factory
        self.timeout = timeout

    async def execute(self, request: GenerateScriptRequest) -> Dict[str, Any]:
        topic = validate_topic(request.topic)
        duration = validate_duration(request.duration)

        generator = select_script_generator(self.config_factory())
        if generator is None:
            raise ServiceUnavailableError("No script generator configured")

        try:
            script = await asyncio.wait_for(generator.generate(topic, duration), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ServiceUnavailableError("Script generation timed out") from None
        except GenerationFailed as exc:
            raise ServiceUnavailableError(f"Script generation failed: {exc}") from exc

        logger.info("Script generated", extra={"provider": generator.name, "duration": duration})
        return {"success": True, "topic": topic, "duration": duration, "script_data": script.to_dict()}


class SearchImagesUseCase(UseCase[SearchImagesRequest, Dict[str, Any]]):
    def __init__(self, config_factory: ConfigFactory = CapabilityConfig.from_env):
        self.config_factory = config_factory

    async def execute(self, request: SearchImagesRequest) -> Dict[str, Any]:
        topic = (request.topic or "").strip()
        keywords = [k.strip() for k in request.keywords if k and k.strip()]
        if not topic and not keywords:
            raise ValidationError("Topic or keywords are required")
        limit = max(1, min(request.max_images, MAX_SELECTION_IMAGES))

        search = build_image_search(self.config_factory())
        if not search.sources:
            raise ServiceUnavailableError("No image source configured")

        try:
            images = await search.search(keywords or [topic], limit, topic)
        except ImageSearchFailed as exc:
            raise ServiceUnavailableError(str(exc)) from exc

        return {
            "success": True,
            "count": len(images),
            "provider": search.name,
            "images": [image.to_dict() for image in images],
        }
