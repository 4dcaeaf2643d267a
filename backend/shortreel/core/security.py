"""
Security utilities for file handling
Keeps user-supplied filenames and job ids from escaping the output tree.
"""

import os
import re
from pathlib import Path
from typing import Optional

from .logging import get_logger

logger = get_logger(__name__, component="security")

_JOB_ID_PATTERN = re.compile(r"^[a-f0-9]{32}$")


def sanitize_filename(filename: str) -> str:
    """
    Reduce a user-supplied filename to a bare, printable basename.

    Path components, null bytes, leading dots, control characters and
    characters reserved on common file systems are removed.

    Raises:
        ValueError: If nothing usable remains

    Example:
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("video_ab12.mp4")
        'video_ab12.mp4'
    """
    original = filename

    cleaned = os.path.basename(filename.replace("\\", "/"))
    cleaned = cleaned.replace("\x00", "").lstrip(".")
    cleaned = "".join(char for char in cleaned if 31 < ord(char) < 127)
    for char in '<>:"|?*':
        cleaned = cleaned.replace(char, "")
    cleaned = cleaned[:255].strip()

    if not cleaned or cleaned.replace(".", "") == "":
        logger.warning("Filename sanitization resulted in empty string", extra={"original": original})
        raise ValueError("Invalid filename after sanitization")

    if cleaned != original:
        logger.info("Filename sanitized", extra={"original": original, "sanitized": cleaned})

    return cleaned


def validate_job_id(job_id: str) -> bool:
    """Job ids are 32 lowercase hex characters."""
    is_valid = bool(_JOB_ID_PATTERN.match(job_id or ""))
    if not is_valid:
        logger.warning("Invalid job ID format", extra={"job_id_value": job_id})
    return is_valid


def validate_path_within_directory(path: Path, allowed_directory: Path) -> bool:
    """True when ``path`` resolves inside ``allowed_directory``."""
    try:
        path.resolve().relative_to(allowed_directory.resolve())
        return True
    except (OSError, RuntimeError, ValueError):
        logger.warning("Path traversal attempt detected", extra={
            "path": str(path),
            "allowed_directory": str(allowed_directory),
        })
        return False


def secure_file_path(base_dir: Path, filename: str) -> Optional[Path]:
    """
    Join a sanitized filename onto ``base_dir``.

    Returns None when the name is unusable or would leave ``base_dir``.
    """
    try:
        safe_name = sanitize_filename(filename)
    except ValueError:
        return None

    path = base_dir / safe_name
    if not validate_path_within_directory(path, base_dir):
        return None
    return path
