"""
Composite image search over sources in priority order.
"""

from typing import List, Sequence

from shortreel.core.exceptions import ImageSearchFailed
from shortreel.core.logging import get_logger
from shortreel.models.script import ImageInfo

from .base import ImageSource

logger = get_logger(__name__, component="composite_images")


class CompositeImageSearch:
    """
    Queries each source in order until ``max_results`` unique URLs are found.

    One source failing is logged and skipped. ImageSearchFailed is raised only
    when every source failed.
    """

    def __init__(self, sources: Sequence[ImageSource]):
        self.sources = list(sources)

    @property
    def name(self) -> str:
        return "+".join(source.name for source in self.sources) or "none"

    async def search(self, keywords: Sequence[str], max_results: int, topic: str = "") -> List[ImageInfo]:
        if not self.sources or max_results <= 0:
            return []

        seen = set()
        results: List[ImageInfo] = []
        failed = 0
        for source in self.sources:
            if len(results) >= max_results:
                break
            try:
                found = await source.search(keywords, max_results - len(results), topic)
            except ImageSearchFailed as exc:
                failed += 1
                logger.warning("Image source failed", extra={"provider": source.name, "error": str(exc)})
                continue
            for image in found:
                if image.url and image.url not in seen:
                    seen.add(image.url)
                    results.append(image)

        if failed == len(self.sources):
            raise ImageSearchFailed("All image sources failed")
        return results[:max_results]
