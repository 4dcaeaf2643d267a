"""
Core Exceptions
Domain error taxonomy. Adapters translate vendor failures into these kinds;
the orchestrator and routes only ever see this hierarchy.
"""

from typing import Optional


class ShortReelError(Exception):
    """Base exception for all application errors."""
    pass


class ValidationError(ShortReelError):
    """Malformed submission. Raised before any job is created."""
    pass


class NotFoundError(ShortReelError):
    """Unknown job id or artifact filename."""
    pass


class ConflictError(ShortReelError):
    """The request conflicts with the job's current state (e.g. already finished)."""
    pass


class ServiceUnavailableError(ShortReelError):
    """A required capability is not configured or did not respond."""
    pass


class StageError(ShortReelError):
    """Base exception for pipeline stage failures."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message


class FatalStageError(StageError):
    """Stage failure with no remaining fallback; the job ends in ``error``."""
    pass


class DegradedStageError(StageError):
    """Stage failure absorbed by a fallback; surfaced as a warning."""
    pass


class GenerationFailed(ShortReelError):
    """Script generation failed upstream or produced unusable content."""
    pass


class SynthesisFailed(ShortReelError):
    """Voice synthesis failed.

    ``reason`` is one of ``auth``, ``rate_limit``, ``quota``, ``upstream``,
    ``timeout`` or ``empty``.
    """

    REASONS = ("auth", "rate_limit", "quota", "upstream", "timeout", "empty")

    def __init__(self, reason: str, message: Optional[str] = None):
        if reason not in self.REASONS:
            reason = "upstream"
        super().__init__(message or f"Voice synthesis failed ({reason})")
        self.reason = reason


class ImageSearchFailed(ShortReelError):
    pass


class ImageDownloadFailed(ShortReelError):
    pass


class AssemblyFailed(ShortReelError):
    """A media operation failed. ``stage`` names the operation."""

    def __init__(self, stage: str, cause: str):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause


class JobCancelled(ShortReelError):
    """The job's cancellation token fired."""

    def __init__(self, message: str = "Job cancelled"):
        super().__init__(message)
