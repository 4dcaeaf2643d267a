"""Image acquisition - stock image search and download."""

from .base import ImageSource, download_image, search_terms
from .composite import CompositeImageSearch
from .pexels import PexelsSource
from .unsplash import UnsplashSource

__all__ = [
    "ImageSource",
    "download_image",
    "search_terms",
    "CompositeImageSearch",
    "PexelsSource",
    "UnsplashSource",
]
