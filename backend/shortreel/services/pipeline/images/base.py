"""
Image source interface and the shared downloader.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from shortreel.core.exceptions import ImageDownloadFailed, ImageSearchFailed
from shortreel.core.logging import get_logger
from shortreel.models.script import ImageInfo

logger = get_logger(__name__, component="images")


def search_terms(keywords: Sequence[str], topic: str = "") -> List[str]:
    """Non-empty, de-duplicated search terms; the topic when there are no keywords."""
    seen = set()
    terms = []
    for keyword in keywords:
        term = keyword.strip().lstrip("#")
        if term and term.lower() not in seen:
            seen.add(term.lower())
            terms.append(term)
    if not terms and topic.strip():
        terms.append(topic.strip())
    return terms


class ImageSource(ABC):
    """A stock image search API."""

    name: str = "images"

    def __init__(
        self,
        per_keyword: int = 2,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.per_keyword = per_keyword
        self.timeout = timeout
        self._transport = transport

    @abstractmethod
    async def search_keyword(self, client: httpx.AsyncClient, keyword: str, count: int) -> List[ImageInfo]:
        """One search call. May raise httpx errors."""

    @abstractmethod
    def _client(self, timeout: float) -> httpx.AsyncClient:
        """Authenticated client for this source."""

    async def search(self, keywords: Sequence[str], count: int, topic: str = "") -> List[ImageInfo]:
        """
        Search every keyword, ``per_keyword`` results each, up to ``count``.

        A failing keyword is skipped. Raises ImageSearchFailed only when
        every keyword failed.
        """
        terms = search_terms(keywords, topic)
        if not terms or count <= 0:
            return []

        results: List[ImageInfo] = []
        failures = 0
        async with self._client(self.timeout) as client:
            for term in terms:
                if len(results) >= count:
                    break
                try:
                    found = await self.search_keyword(client, term, min(self.per_keyword, count - len(results)))
                except (httpx.HTTPError, ValueError, KeyError) as exc:
                    failures += 1
                    logger.warning(
                        "Image search failed for keyword",
                        extra={"provider": self.name, "keyword": term, "error": str(exc)},
                    )
                    continue
                results.extend(found)

        if failures == len(terms):
            raise ImageSearchFailed(f"{self.name} search failed for every keyword")
        return results[:count]

    async def check(self, timeout: float) -> Optional[str]:
        """Run one tiny search to verify the credential."""
        try:
            async with self._client(timeout) as client:
                await self.search_keyword(client, "nature", 1)
        except httpx.HTTPStatusError as exc:
            raise ImageSearchFailed(f"{self.name} returned HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            raise ImageSearchFailed(f"{self.name} request failed: {exc}") from exc
        return None


async def download_image(
    url: str,
    output_path: Path,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Path:
    """Fetch ``url`` into ``output_path``; raises ImageDownloadFailed."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise ImageDownloadFailed(f"Failed to download image: {exc}") from exc

    if not response.content:
        raise ImageDownloadFailed("Failed to download image: empty body")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(response.content)
    return output_path
