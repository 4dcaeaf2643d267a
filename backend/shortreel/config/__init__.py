"""
Application configuration and settings
"""

import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .paths import (
    APP_DIR,
    BACKEND_DIR,
    OUTPUT_DIR,
    VIDEOS_DIR,
    DRAFT_DIR,
    NO_VOICE_DIR,
    SCRIPTS_DIR,
    TEMP_DIR,
    ARTIFACT_DIRS,
)
from .constants import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    CORS_ORIGINS,
    MIN_DURATION_SECONDS,
    MAX_DURATION_SECONDS,
    DEFAULT_DURATION_SECONDS,
    DEFAULT_MODE,
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    PLACEHOLDER_COLOR,
    IMAGES_PER_KEYWORD,
    MAX_PIPELINE_IMAGES,
    MAX_SELECTION_IMAGES,
    AUDIO_UPLOAD_EXTENSIONS,
    IMAGE_UPLOAD_EXTENSIONS,
    MAX_REGENERATE_IMAGES,
)


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


# Job registry
JOB_LOG_LIMIT = _env_int("JOB_LOG_LIMIT", 100, 1)
LOG_TAIL = _env_int("LOG_TAIL", JOB_LOG_LIMIT, 0)
JOB_RETENTION_HOURS = _env_float("JOB_RETENTION_HOURS", 24.0, 0.0)
TEMP_RETENTION_HOURS = _env_float("TEMP_RETENTION_HOURS", 2.0, 0.0)
SWEEP_INTERVAL_MINUTES = _env_int("SWEEP_INTERVAL_MINUTES", 60, 1)

# 0 means no admission limit
MAX_CONCURRENT_JOBS = _env_int("MAX_CONCURRENT_JOBS", 0, 0)

# Per-capability call timeouts (seconds)
SCRIPT_TIMEOUT_SECONDS = _env_float("SCRIPT_TIMEOUT_SECONDS", 120.0, 1.0)
VOICE_TIMEOUT_SECONDS = _env_float("VOICE_TIMEOUT_SECONDS", 120.0, 1.0)
IMAGE_TIMEOUT_SECONDS = _env_float("IMAGE_TIMEOUT_SECONDS", 30.0, 1.0)
ASSEMBLY_TIMEOUT_SECONDS = _env_float("ASSEMBLY_TIMEOUT_SECONDS", 600.0, 1.0)
HEALTH_CHECK_TIMEOUT_SECONDS = _env_float("HEALTH_CHECK_TIMEOUT_SECONDS", 5.0, 0.5)

# Editing uploads (bytes, per file)
MAX_UPLOAD_SIZE = _env_int("MAX_UPLOAD_SIZE", 50 * 1024 * 1024, 1)
