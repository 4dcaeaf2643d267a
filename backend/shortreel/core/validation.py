"""
Submission validation.

Runs synchronously before a job exists, so a rejected submission never
reaches the registry. Raises ValidationError; the route layer maps it to 400.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from shortreel.config import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_MODE,
    MAX_DURATION_SECONDS,
    MIN_DURATION_SECONDS,
)
from shortreel.models.status import JobMode

from .exceptions import ValidationError


@dataclass(frozen=True)
class Submission:
    """A validated job submission."""
    topic: str
    duration: int
    mode: JobMode
    options: Dict[str, Any] = field(default_factory=dict)


def validate_topic(topic: Any) -> str:
    if not isinstance(topic, str) or not topic.strip():
        raise ValidationError("Topic is required")
    return topic.strip()


def validate_duration(duration: Any) -> int:
    if duration is None:
        return DEFAULT_DURATION_SECONDS
    # bool is an int subclass; reject it explicitly
    if isinstance(duration, bool):
        raise ValidationError("Duration must be an integer number of seconds")
    if isinstance(duration, float) and duration.is_integer():
        duration = int(duration)
    if not isinstance(duration, int):
        raise ValidationError("Duration must be an integer number of seconds")
    if not MIN_DURATION_SECONDS <= duration <= MAX_DURATION_SECONDS:
        raise ValidationError(
            f"Duration must be between {MIN_DURATION_SECONDS} and {MAX_DURATION_SECONDS} seconds"
        )
    return duration


def validate_mode(mode: Any) -> JobMode:
    if mode is None:
        return JobMode(DEFAULT_MODE)
    try:
        return JobMode(mode)
    except ValueError:
        allowed = ", ".join(m.value for m in JobMode)
        raise ValidationError(f"Invalid mode '{mode}'. Use one of: {allowed}") from None


def validate_submission(
    topic: Any,
    duration: Any = None,
    mode: Any = None,
    options: Optional[Dict[str, Any]] = None,
) -> Submission:
    """Validate and normalize a job submission."""
    if options is not None and not isinstance(options, dict):
        raise ValidationError("Options must be an object")
    return Submission(
        topic=validate_topic(topic),
        duration=validate_duration(duration),
        mode=validate_mode(mode),
        options=dict(options or {}),
    )


def validate_upload_extension(filename: Optional[str], allowed: Sequence[str]) -> str:
    """Return the lower-cased extension of an uploaded file, or raise ValidationError."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in allowed:
        raise ValidationError(f"Unsupported file type '{suffix or filename}'. Use one of: {', '.join(allowed)}")
    return suffix
