"""
Job repository - Abstract data access for jobs.

Implements the Repository pattern so the registry logic does not care where
job records live. The in-memory implementation is the only one shipped; jobs
do not survive a restart.

Classes:
    LogEntry: One timestamped line of a job's log
    Job: A job's state and metadata
    JobRepository: Abstract interface for job data access
    InMemoryJobRepository: Lock-guarded dict implementation
"""

import copy
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, UTC
from threading import RLock
from typing import Any, Deque, Dict, List, Optional

from shortreel.models.status import JobMode, JobStatus


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "message": self.message,
        }


@dataclass
class Job:
    """
    A job's state and metadata.

    Attributes:
        id: Unguessable identifier, fixed at creation
        topic: Trimmed, non-empty topic text
        duration: Target length in seconds
        mode: Requested output shape
        options: Mode-specific payload, opaque to the registry
        status: Current pipeline state
        progress: Human-readable progress message
        logs: Bounded log; the oldest entry is evicted first
        result: Present only once ``completed``
        error: Present only once ``error``
    """
    id: str
    topic: str
    duration: int
    mode: JobMode
    options: Dict[str, Any] = field(default_factory=dict)
    status: JobStatus = JobStatus.PENDING
    progress: str = "Job created"
    logs: Deque[LogEntry] = field(default_factory=deque)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def snapshot(self) -> "Job":
        """Detached copy safe to hand out of the repository lock."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "duration": self.duration,
            "mode": self.mode.value,
            "status": self.status.value,
            "progress": self.progress,
            "logs": [entry.to_dict() for entry in self.logs],
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class JobRepository(ABC):
    """
    Abstract repository for job data access.

    Implementations must be safe to call from the event loop and from worker
    threads at the same time. Every read returns a copy.
    """

    @abstractmethod
    def create(self, job: Job) -> bool:
        """
        Store a new job.

        Returns:
            False if a job with the same id already exists (nothing stored)
        """

    @abstractmethod
    def get(self, job_id: str) -> Optional[Job]:
        """Retrieve a copy of the job, or None."""

    @abstractmethod
    def update(self, job_id: str, **changes: Any) -> Optional[Job]:
        """
        Merge ``changes`` into the stored job and bump ``updated_at``.

        Returns:
            The updated copy, or None if the job no longer exists
        """

    @abstractmethod
    def append_log(self, job_id: str, entry: LogEntry) -> bool:
        """Append a log entry. Returns False if the job no longer exists."""

    @abstractmethod
    def sweep(self, max_age: timedelta) -> List[str]:
        """Remove every job created at least ``max_age`` ago; return the removed ids."""

    @abstractmethod
    def delete(self, job_id: str) -> bool:
        """Delete a job. Returns False if not found."""

    @abstractmethod
    def list_all(self) -> List[Job]:
        """Copies of every stored job, oldest first."""


class InMemoryJobRepository(JobRepository):
    """
    Dict-backed repository guarded by one re-entrant lock.

    Each job's log is a ``deque`` with ``maxlen=log_limit`` so eviction of the
    oldest entry happens on append.
    """

    MUTABLE_FIELDS = frozenset({"status", "progress", "result", "error"})

    def __init__(self, log_limit: int = 100):
        if log_limit < 1:
            raise ValueError("log_limit must be at least 1")
        self._log_limit = log_limit
        self._jobs: Dict[str, Job] = {}
        self._lock = RLock()

    @property
    def log_limit(self) -> int:
        return self._log_limit

    def create(self, job: Job) -> bool:
        with self._lock:
            if job.id in self._jobs:
                return False
            stored = job.snapshot()
            stored.logs = deque(stored.logs, maxlen=self._log_limit)
            self._jobs[job.id] = stored
            return True

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.snapshot() if job else None

    def update(self, job_id: str, **changes: Any) -> Optional[Job]:
        unknown = set(changes) - self.MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update job fields: {', '.join(sorted(unknown))}")

        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            for name, value in changes.items():
                setattr(job, name, value)
            job.updated_at = utcnow()
            return job.snapshot()

    def append_log(self, job_id: str, entry: LogEntry) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return False
            job.logs.append(entry)
            job.updated_at = utcnow()
            return True

    def sweep(self, max_age: timedelta) -> List[str]:
        cutoff = utcnow() - max_age
        with self._lock:
            expired = [job_id for job_id, job in self._jobs.items() if job.created_at <= cutoff]
            for job_id in expired:
                del self._jobs[job_id]
            return expired

    def delete(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def list_all(self) -> List[Job]:
        with self._lock:
            jobs = sorted(self._jobs.values(), key=lambda job: job.created_at)
            return [job.snapshot() for job in jobs]
