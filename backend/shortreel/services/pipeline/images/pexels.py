"""
Pexels image search.
"""

from typing import List

import httpx

from shortreel.models.script import ImageInfo

from .base import ImageSource


class PexelsSource(ImageSource):
    name = "pexels"

    BASE_URL = "https://api.pexels.com"

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Authorization": self.api_key},
            timeout=timeout,
            transport=self._transport,
        )

    async def search_keyword(self, client: httpx.AsyncClient, keyword: str, count: int) -> List[ImageInfo]:
        response = await client.get(
            "/v1/search",
            params={"query": keyword, "per_page": count, "orientation": "portrait"},
        )
        response.raise_for_status()
        return [
            ImageInfo(
                url=photo["src"]["large"],
                thumbnail=photo["src"].get("tiny") or photo["src"].get("small", ""),
                source=self.name,
                author=photo.get("photographer"),
            )
            for photo in response.json().get("photos", [])
        ]
