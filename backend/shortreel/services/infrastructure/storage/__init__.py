"""Storage layer - job records and retention."""

from .job_repository import InMemoryJobRepository, Job, JobRepository, LogEntry

__all__ = ["InMemoryJobRepository", "Job", "JobRepository", "LogEntry"]
