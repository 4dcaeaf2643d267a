"""
Tests for shortreel.services.infrastructure.orchestration.runner
"""

import asyncio

import pytest

from shortreel.core.exceptions import JobCancelled
from shortreel.models.status import JobMode, JobStatus
from shortreel.services.infrastructure.orchestration import CancellationToken, JobManager, JobRunner


@pytest.mark.asyncio
class TestCancellationToken:

    async def test_guard_returns_result(self):
        token = CancellationToken()

        async def work():
            return 42

        assert await token.guard(work()) == 42

    async def test_guard_raises_when_cancelled_first(self):
        token = CancellationToken()
        token.cancel()

        async def work():
            return 1

        coro = work()
        with pytest.raises(JobCancelled):
            await token.guard(coro)
        coro.close()

    async def test_guard_aborts_inflight_work(self):
        token = CancellationToken()
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(token.guard(slow()))
        await started.wait()
        token.cancel()

        with pytest.raises(JobCancelled):
            await task

    async def test_guard_timeout(self):
        token = CancellationToken()
        with pytest.raises(asyncio.TimeoutError):
            await token.guard(asyncio.sleep(10), timeout=0.01)


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
class TestJobRunner:

    async def test_start_runs_driver_once_per_job(self):
        manager = JobManager()
        job_id = manager.create_job("Volcanoes", 30, JobMode.DRAFT)
        release = asyncio.Event()
        calls = []

        async def driver(jid, token):
            calls.append(jid)
            await release.wait()

        runner = JobRunner(manager, driver)
        assert runner.start(job_id) is True
        assert runner.start(job_id) is False
        await asyncio.sleep(0)
        assert runner.is_running(job_id)

        release.set()
        await _wait_until(lambda: not runner.is_running(job_id))
        assert calls == [job_id]

    async def test_cancel_marks_job_failed(self):
        manager = JobManager()
        job_id = manager.create_job("Volcanoes", 30, JobMode.DRAFT)

        async def driver(jid, token):
            await token.guard(asyncio.sleep(10))

        runner = JobRunner(manager, driver)
        runner.start(job_id)
        await asyncio.sleep(0.01)

        assert runner.cancel(job_id) is True
        await _wait_until(lambda: manager.get_job(job_id).status.is_terminal())

        job = manager.get_job(job_id)
        assert job.status == JobStatus.ERROR
        assert job.error == "Job cancelled"

    async def test_cancel_without_driver(self):
        runner = JobRunner(JobManager(), driver=None)
        assert runner.cancel("0" * 32) is False

    async def test_driver_crash_is_recorded(self):
        manager = JobManager()
        job_id = manager.create_job("Volcanoes", 30, JobMode.DRAFT)

        async def driver(jid, token):
            raise RuntimeError("kaboom")

        runner = JobRunner(manager, driver)
        runner.start(job_id)
        await _wait_until(lambda: manager.get_job(job_id).status.is_terminal())

        assert manager.get_job(job_id).error == "Unexpected error: kaboom"

    async def test_admission_limit_keeps_queued_jobs_pending(self):
        manager = JobManager()
        first = manager.create_job("One", 30, JobMode.DRAFT)
        second = manager.create_job("Two", 30, JobMode.DRAFT)
        release = asyncio.Event()
        started = []

        async def driver(jid, token):
            started.append(jid)
            await release.wait()

        runner = JobRunner(manager, driver, max_concurrent=1)
        runner.start(first)
        runner.start(second)
        await asyncio.sleep(0.02)

        assert started == [first]
        assert manager.get_job(second).status == JobStatus.PENDING

        release.set()
        await _wait_until(lambda: runner.active_count == 0)
        assert started == [first, second]

    async def test_shutdown_cancels_live_jobs(self):
        manager = JobManager()
        job_id = manager.create_job("Volcanoes", 30, JobMode.DRAFT)

        async def driver(jid, token):
            await token.guard(asyncio.sleep(10))

        runner = JobRunner(manager, driver)
        runner.start(job_id)
        await asyncio.sleep(0.01)
        await runner.shutdown(timeout=1)

        assert manager.get_job(job_id).status == JobStatus.ERROR
        assert runner.active_count == 0
