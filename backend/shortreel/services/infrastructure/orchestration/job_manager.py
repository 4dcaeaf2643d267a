"""
Job Manager - The job registry.

Allocates unguessable ids, enforces monotonic status transitions and keeps
each job's bounded log. Storage is delegated to a JobRepository.
"""

import logging
import secrets
from datetime import timedelta
from threading import RLock
from typing import Any, Dict, List, Optional

from shortreel.config import JOB_LOG_LIMIT
from shortreel.core.logging import get_logger
from shortreel.models.status import JobMode, JobStatus
from shortreel.services.infrastructure.storage.job_repository import (
    InMemoryJobRepository,
    Job,
    JobRepository,
    LogEntry,
    utcnow,
)

logger = get_logger(__name__, component="job_manager")

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_UNSET: Any = object()


class JobManager:
    """Creates, reads and mutates jobs; the only writer to the repository."""

    def __init__(self, repository: Optional[JobRepository] = None):
        self._repository = repository or InMemoryJobRepository(log_limit=JOB_LOG_LIMIT)
        self._lock = RLock()

    @property
    def repository(self) -> JobRepository:
        return self._repository

    def create_job(
        self,
        topic: str,
        duration: int,
        mode: JobMode,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Store a new ``pending`` job and return its id."""
        while True:
            job = Job(
                id=secrets.token_hex(16),
                topic=topic,
                duration=duration,
                mode=mode,
                options=dict(options or {}),
            )
            if self._repository.create(job):
                break
        logger.info("Job created", extra={"job": job.id, "mode": mode.value, "duration": duration})
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        return self._repository.get(job_id)

    def update_job(
        self,
        job_id: str,
        status: Optional[JobStatus] = None,
        progress: Optional[str] = None,
        result: Any = _UNSET,
        error: Any = _UNSET,
    ) -> Optional[Job]:
        """
        Merge fields into the job.

        No-op (returns None) if the job is gone. An update that would move a
        terminal job to any other status is ignored with a warning.
        """
        changes: Dict[str, Any] = {}
        if status is not None:
            changes["status"] = status
        if progress is not None:
            changes["progress"] = progress
        if result is not _UNSET:
            changes["result"] = result
        if error is not _UNSET:
            changes["error"] = error

        with self._lock:
            current = self._repository.get(job_id)
            if current is None:
                return None
            if current.status.is_terminal() and (
                (status is not None and status is not current.status)
                or result is not _UNSET
                or error is not _UNSET
            ):
                logger.warning(
                    "Ignoring update to terminal job",
                    extra={"job": job_id, "current": current.status.value,
                           "requested": status.value if status else None},
                )
                return current
            if not changes:
                return current
            return self._repository.update(job_id, **changes)

    def append_log(self, job_id: str, message: str, level: str = "info") -> None:
        """Append a timestamped entry; mirrored to the process log."""
        level = level if level in LOG_LEVELS else "info"
        entry = LogEntry(timestamp=utcnow(), level=level, message=message)
        if self._repository.append_log(job_id, entry):
            logger.log(LOG_LEVELS[level], message, extra={"job": job_id})

    def sweep(self, max_age: timedelta) -> List[str]:
        """Remove jobs created at least ``max_age`` ago; return their ids."""
        removed = self._repository.sweep(max_age)
        if removed:
            logger.info("Swept expired jobs", extra={"count": len(removed)})
        return removed

    def list_jobs(self) -> List[Job]:
        return self._repository.list_all()


_job_manager_instance: Optional[JobManager] = None


def get_job_manager() -> JobManager:
    """Get the shared JobManager instance (singleton pattern)."""
    global _job_manager_instance
    if _job_manager_instance is None:
        _job_manager_instance = JobManager()
    return _job_manager_instance


def reset_job_manager(manager: Optional[JobManager] = None) -> JobManager:
    """Replace the shared instance; used by tests and app startup."""
    global _job_manager_instance
    _job_manager_instance = manager or JobManager()
    return _job_manager_instance
