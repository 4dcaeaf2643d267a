"""
Job runner - fire-and-forget scheduling of pipeline drivers.

One asyncio task per job id, never two. Each job gets a CancellationToken;
every adapter await in the pipeline is raced against it so a cancel takes
effect at the next await point.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from shortreel.config import MAX_CONCURRENT_JOBS
from shortreel.core.exceptions import JobCancelled
from shortreel.core.logging import get_logger, job_context
from shortreel.models.status import JobStatus

from .job_manager import JobManager

logger = get_logger(__name__, component="job_runner")

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation flag that can be awaited."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise JobCancelled()

    async def guard(self, awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
        """
        Await ``awaitable`` unless the token fires or ``timeout`` elapses first.

        Raises:
            JobCancelled: The token fired; the inner task is cancelled
            asyncio.TimeoutError: The timeout elapsed; the inner task is cancelled
        """
        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        try:
            await work
        except (asyncio.CancelledError, Exception):
            pass
        if self.cancelled:
            raise JobCancelled()
        raise asyncio.TimeoutError()


PipelineDriver = Callable[[str, CancellationToken], Awaitable[None]]


class JobRunner:
    """
    Starts pipeline drivers out-of-band.

    ``max_concurrent`` of 0 means no admission limit; a positive value bounds
    running drivers with a semaphore and queued jobs stay ``pending``.
    """

    def __init__(
        self,
        job_manager: JobManager,
        driver: PipelineDriver,
        max_concurrent: int = MAX_CONCURRENT_JOBS,
    ):
        self.job_manager = job_manager
        self.driver = driver
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent > 0 else None
        self._tasks: Dict[str, asyncio.Task] = {}
        self._tokens: Dict[str, CancellationToken] = {}

    def is_running(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def start(self, job_id: str) -> bool:
        """Schedule the driver for ``job_id``. Returns False if one is already live."""
        if self.is_running(job_id):
            logger.warning("Driver already running", extra={"job": job_id})
            return False

        token = CancellationToken()
        task = asyncio.create_task(self._drive(job_id, token), name=f"job-{job_id[:8]}")
        self._tasks[job_id] = task
        self._tokens[job_id] = token
        task.add_done_callback(lambda _t, jid=job_id: self._forget(jid, _t))
        return True

    def _forget(self, job_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            self._tasks.pop(job_id, None)
            self._tokens.pop(job_id, None)

    async def _drive(self, job_id: str, token: CancellationToken) -> None:
        with job_context(job_id):
            try:
                if self._semaphore is None:
                    await self.driver(job_id, token)
                    return
                await token.guard(self._semaphore.acquire())
                try:
                    await self.driver(job_id, token)
                finally:
                    self._semaphore.release()
            except JobCancelled:
                self._record_failure(job_id, "Job cancelled")
            except asyncio.CancelledError:
                self._record_failure(job_id, "Job cancelled")
                raise
            except Exception as exc:
                logger.error("Pipeline driver crashed", extra={"job": job_id, "error": str(exc)}, exc_info=True)
                self._record_failure(job_id, f"Unexpected error: {exc}")

    def _record_failure(self, job_id: str, message: str) -> None:
        job = self.job_manager.get_job(job_id)
        if job is None or job.status.is_terminal():
            return
        self.job_manager.update_job(job_id, status=JobStatus.ERROR, progress=message, error=message)
        self.job_manager.append_log(job_id, message, "error")

    def cancel(self, job_id: str) -> bool:
        """Fire the job's token. Returns False if no driver is live for it."""
        token = self._tokens.get(job_id)
        if token is None or not self.is_running(job_id):
            return False
        token.cancel()
        logger.info("Cancellation requested", extra={"job": job_id})
        return True

    async def shutdown(self, timeout: float = 10.0) -> None:
        """Cancel every live job and wait for drivers to finish their cleanup."""
        for token in list(self._tokens.values()):
            token.cancel()
        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


_job_runner_instance: Optional[JobRunner] = None


def get_job_runner() -> Optional[JobRunner]:
    return _job_runner_instance


def set_job_runner(runner: Optional[JobRunner]) -> Optional[JobRunner]:
    global _job_runner_instance
    _job_runner_instance = runner
    return runner
