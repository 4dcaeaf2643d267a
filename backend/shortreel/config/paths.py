"""
Paths configuration

Centralized directory paths for the application. Every artifact category has
its own directory so downloads can be resolved from the category alone.
"""

import os
from pathlib import Path

# Base directories
APP_DIR = Path(__file__).parent.parent
BACKEND_DIR = APP_DIR.parent
OUTPUT_DIR = Path(os.getenv("SHORTREEL_OUTPUT_DIR", str(BACKEND_DIR / "output")))

# Final artifacts
VIDEOS_DIR = OUTPUT_DIR / "videos"
DRAFT_DIR = OUTPUT_DIR / "draft"
NO_VOICE_DIR = OUTPUT_DIR / "no_voice"
SCRIPTS_DIR = OUTPUT_DIR / "scripts"

# Intermediate artifacts (audio, images, segments, subtitles)
TEMP_DIR = OUTPUT_DIR / "temp"

# Download category -> directory
ARTIFACT_DIRS = {
    "videos": VIDEOS_DIR,
    "draft": DRAFT_DIR,
    "no_voice": NO_VOICE_DIR,
    "scripts": SCRIPTS_DIR,
}

# Ensure directories exist
for _directory in (OUTPUT_DIR, TEMP_DIR, *ARTIFACT_DIRS.values()):
    _directory.mkdir(parents=True, exist_ok=True)

__all__ = [
    "APP_DIR",
    "BACKEND_DIR",
    "OUTPUT_DIR",
    "VIDEOS_DIR",
    "DRAFT_DIR",
    "NO_VOICE_DIR",
    "SCRIPTS_DIR",
    "TEMP_DIR",
    "ARTIFACT_DIRS",
]
