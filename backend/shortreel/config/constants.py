"""
Constants configuration

API settings, CORS configuration, submission bounds and render geometry.
"""

# API settings
API_TITLE = "ShortReel API"
API_DESCRIPTION = "Generate short-form vertical videos from a topic"
API_VERSION = "1.0.0"

# CORS origins
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]

# Submission bounds
MIN_DURATION_SECONDS = 15
MAX_DURATION_SECONDS = 60
DEFAULT_DURATION_SECONDS = 60
DEFAULT_MODE = "draft"

# Vertical 9:16 output
VIDEO_WIDTH = 1080
VIDEO_HEIGHT = 1920
VIDEO_FPS = 30
PLACEHOLDER_COLOR = "#1a1a2e"

# Pipeline limits
IMAGES_PER_KEYWORD = 2
MAX_PIPELINE_IMAGES = 10
MAX_SELECTION_IMAGES = 20

# Accepted uploads for the editing endpoints
AUDIO_UPLOAD_EXTENSIONS = (".mp3", ".wav", ".m4a", ".aac", ".ogg")
IMAGE_UPLOAD_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
MAX_REGENERATE_IMAGES = 10

__all__ = [
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "MIN_DURATION_SECONDS",
    "MAX_DURATION_SECONDS",
    "DEFAULT_DURATION_SECONDS",
    "DEFAULT_MODE",
    "VIDEO_WIDTH",
    "VIDEO_HEIGHT",
    "VIDEO_FPS",
    "PLACEHOLDER_COLOR",
    "IMAGES_PER_KEYWORD",
    "MAX_PIPELINE_IMAGES",
    "MAX_SELECTION_IMAGES",
    "AUDIO_UPLOAD_EXTENSIONS",
    "IMAGE_UPLOAD_EXTENSIONS",
    "MAX_REGENERATE_IMAGES",
]
