"""
Job status and mode enumerations.

Statuses follow the pipeline stages in order; ``completed`` and ``error``
are terminal.
"""

from enum import Enum


class JobStatus(Enum):
    """Enumeration of all possible job statuses."""

    PENDING = "pending"
    SCRIPTING = "scripting"
    VOICING = "voicing"
    IMAGING = "imaging"
    ASSEMBLING = "assembling"
    MUXING = "muxing"
    COMPLETED = "completed"
    ERROR = "error"

    def is_terminal(self) -> bool:
        """Check if this status is a terminal state (no further progress)."""
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)

    def is_in_progress(self) -> bool:
        """Check if this status indicates active processing."""
        return not self.is_terminal() and self is not JobStatus.PENDING


class JobMode(Enum):
    """Output shape requested at submission."""

    DRAFT = "draft"
    FINAL = "final"
    REPLACE_VOICE = "replace-voice"
    PIP = "pip"
    BATCH = "batch"

    @property
    def is_draft(self) -> bool:
        return self is JobMode.DRAFT


# Stage order, used to describe pipeline position
PIPELINE_STAGES = (
    JobStatus.SCRIPTING,
    JobStatus.VOICING,
    JobStatus.IMAGING,
    JobStatus.ASSEMBLING,
    JobStatus.MUXING,
)


__all__ = [
    "JobStatus",
    "JobMode",
    "PIPELINE_STAGES",
]
