"""
Unsplash image search.
"""

from typing import List

import httpx

from shortreel.models.script import ImageInfo

from .base import ImageSource


class UnsplashSource(ImageSource):
    name = "unsplash"

    BASE_URL = "https://api.unsplash.com"

    def __init__(self, access_key: str, **kwargs):
        super().__init__(**kwargs)
        self.access_key = access_key

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Authorization": f"Client-ID {self.access_key}", "Accept-Version": "v1"},
            timeout=timeout,
            transport=self._transport,
        )

    async def search_keyword(self, client: httpx.AsyncClient, keyword: str, count: int) -> List[ImageInfo]:
        response = await client.get(
            "/search/photos",
            params={"query": keyword, "per_page": count, "orientation": "portrait"},
        )
        response.raise_for_status()
        return [
            ImageInfo(
                url=photo["urls"]["regular"],
                thumbnail=photo["urls"].get("thumb") or photo["urls"].get("small", ""),
                source=self.name,
                author=(photo.get("user") or {}).get("name"),
            )
            for photo in response.json().get("results", [])
        ]
