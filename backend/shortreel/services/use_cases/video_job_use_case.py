"""
Video job use cases - submission, status, cancellation and cleanup.

Keeps HTTP routes thin: validation, registry access and runner wiring live
here. Every failure is raised as a ShortReelError subclass.
"""

from typing import Any, Dict, Optional

from shortreel.core.exceptions import ConflictError, NotFoundError, ServiceUnavailableError
from shortreel.core.logging import get_logger
from shortreel.core.validation import validate_submission
from shortreel.models.status import JobStatus
from shortreel.models.videos import CancelResponse, CleanupResponse, CreateVideoRequest, CreateVideoResponse
from shortreel.services.infrastructure.orchestration import JobManager, JobRunner
from shortreel.services.infrastructure.storage.retention import RetentionSweeper
from shortreel.services.pipeline.result import project_job

from .base import UseCase

logger = get_logger(__name__, component="video_jobs")


class CreateVideoJobUseCase(UseCase[CreateVideoRequest, CreateVideoResponse]):
    """Validate a submission, register the job and start its pipeline."""

    def __init__(self, job_manager: JobManager, runner: Optional[JobRunner]):
        self.job_manager = job_manager
        self.runner = runner

    async def execute(self, request: CreateVideoRequest) -> CreateVideoResponse:
        submission = validate_submission(
            request.topic,
            duration=request.duration,
            mode=request.mode,
            options=request.options,
        )
        if self.runner is None:
            raise ServiceUnavailableError("Job runner is not running")

        job_id = self.job_manager.create_job(
            submission.topic,
            submission.duration,
            submission.mode,
            submission.options,
        )
        self.job_manager.append_log(job_id, f"Job created: \"{submission.topic}\" ({submission.duration}s, {submission.mode.value})")
        self.runner.start(job_id)

        return CreateVideoResponse(
            job_id=job_id,
            mode=submission.mode.value,
            status=JobStatus.PENDING.value,
            message="Video generation started",
        )


class JobStatusUseCase(UseCase[str, Dict[str, Any]]):
    def __init__(self, job_manager: JobManager):
        self.job_manager = job_manager

    async def execute(self, request: str) -> Dict[str, Any]:
        job = self.job_manager.get_job(request)
        if job is None:
            raise NotFoundError("Job not found")
        return project_job(job)


class CancelJobUseCase(UseCase[str, CancelResponse]):
    """
    Cancel a job that has not finished yet.

    A live driver is signalled through its token and records the failure
    itself. A job with no live driver is marked failed directly.
    """

    def __init__(self, job_manager: JobManager, runner: Optional[JobRunner]):
        self.job_manager = job_manager
        self.runner = runner

    async def execute(self, request: str) -> CancelResponse:
        job_id = request
        job = self.job_manager.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.status.is_terminal():
            raise ConflictError(f"Job already {job.status.value}")

        signalled = self.runner is not None and self.runner.cancel(job_id)
        if not signalled:
            self.job_manager.update_job(job_id, status=JobStatus.ERROR, progress="Job cancelled", error="Job cancelled")
            self.job_manager.append_log(job_id, "Job cancelled", "error")
        logger.info("Job cancel requested", extra={"job": job_id, "signalled": signalled})
        return CancelResponse(job_id=job_id, cancelled=True)


class CleanupTempFilesUseCase(UseCase[Optional[float], CleanupResponse]):
    """Delete temp files older than the given age (default: temp retention)."""

    def __init__(self, sweeper: RetentionSweeper):
        self.sweeper = sweeper

    async def execute(self, request: Optional[float] = None) -> CleanupResponse:
        deleted = self.sweeper.cleanup_temp_files(request)
        logger.info("Manual temp cleanup", extra={"deleted": deleted})
        return CleanupResponse(deleted_count=deleted)


class CleanupJobUseCase(UseCase[str, CleanupResponse]):
    """Force-delete one job's temp and output files."""

    def __init__(self, sweeper: RetentionSweeper):
        self.sweeper = sweeper

    async def execute(self, request: str) -> CleanupResponse:
        deleted = self.sweeper.cleanup_job_files(request, include_outputs=True)
        logger.info("Manual job cleanup", extra={"job": request, "deleted": deleted})
        return CleanupResponse(job_id=request, deleted_count=deleted)
