"""Job orchestration - registry, runner and cancellation."""

from .job_manager import JobManager, get_job_manager, reset_job_manager
from .runner import CancellationToken, JobRunner, get_job_runner, set_job_runner

__all__ = [
    "JobManager",
    "get_job_manager",
    "reset_job_manager",
    "CancellationToken",
    "JobRunner",
    "get_job_runner",
    "set_job_runner",
]
