"""
Routes module - contains all API route handlers
"""

from .videos import router as videos_router
from .checks import router as checks_router

__all__ = [
    "videos_router",
    "checks_router",
]
