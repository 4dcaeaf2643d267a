"""
Tests for shortreel.services.infrastructure.storage.job_repository
"""

from datetime import timedelta

import pytest

from shortreel.models.status import JobMode, JobStatus
from shortreel.services.infrastructure.storage.job_repository import (
    InMemoryJobRepository,
    Job,
    LogEntry,
    utcnow,
)


def _job(job_id="a" * 32, **kwargs) -> Job:
    return Job(id=job_id, topic="Volcanoes", duration=30, mode=JobMode.DRAFT, **kwargs)


def _entry(message: str) -> LogEntry:
    return LogEntry(timestamp=utcnow(), level="info", message=message)


class TestInMemoryJobRepository:

    def test_create_and_get_returns_copy(self):
        repo = InMemoryJobRepository()
        assert repo.create(_job()) is True

        fetched = repo.get("a" * 32)
        fetched.progress = "mutated outside"

        assert repo.get("a" * 32).progress == "Job created"
        assert repo.get("a" * 32).status == JobStatus.PENDING

    def test_create_rejects_duplicate_id(self):
        repo = InMemoryJobRepository()
        repo.create(_job())
        assert repo.create(_job()) is False

    def test_get_missing_returns_none(self):
        assert InMemoryJobRepository().get("missing") is None

    def test_update_merges_fields_and_bumps_timestamp(self):
        repo = InMemoryJobRepository()
        repo.create(_job())
        before = repo.get("a" * 32).updated_at

        updated = repo.update("a" * 32, status=JobStatus.SCRIPTING, progress="Generating script...")

        assert updated.status == JobStatus.SCRIPTING
        assert updated.progress == "Generating script..."
        assert updated.updated_at >= before

    def test_update_missing_job_is_noop(self):
        assert InMemoryJobRepository().update("missing", progress="x") is None

    def test_update_rejects_immutable_fields(self):
        repo = InMemoryJobRepository()
        repo.create(_job())
        with pytest.raises(ValueError):
            repo.update("a" * 32, id="b" * 32)

    def test_log_is_capped_fifo(self):
        repo = InMemoryJobRepository(log_limit=3)
        repo.create(_job())
        for i in range(5):
            assert repo.append_log("a" * 32, _entry(f"line {i}"))

        messages = [entry.message for entry in repo.get("a" * 32).logs]
        assert messages == ["line 2", "line 3", "line 4"]

    def test_append_log_missing_job(self):
        assert InMemoryJobRepository().append_log("missing", _entry("x")) is False

    def test_sweep_zero_removes_everything(self):
        repo = InMemoryJobRepository()
        repo.create(_job("a" * 32))
        repo.create(_job("b" * 32))

        removed = repo.sweep(timedelta(0))

        assert sorted(removed) == ["a" * 32, "b" * 32]
        assert repo.list_all() == []

    def test_sweep_large_age_removes_nothing(self):
        repo = InMemoryJobRepository()
        repo.create(_job())
        assert repo.sweep(timedelta(days=365)) == []
        assert repo.get("a" * 32) is not None

    def test_sweep_only_old_jobs(self):
        repo = InMemoryJobRepository()
        repo.create(_job("a" * 32, created_at=utcnow() - timedelta(hours=25)))
        repo.create(_job("b" * 32))

        assert repo.sweep(timedelta(hours=24)) == ["a" * 32]
        assert repo.get("b" * 32) is not None

    def test_delete_and_list_all(self):
        repo = InMemoryJobRepository()
        repo.create(_job("a" * 32, created_at=utcnow() - timedelta(minutes=1)))
        repo.create(_job("b" * 32))

        assert [job.id for job in repo.list_all()] == ["a" * 32, "b" * 32]
        assert repo.delete("a" * 32) is True
        assert repo.delete("a" * 32) is False

    def test_invalid_log_limit(self):
        with pytest.raises(ValueError):
            InMemoryJobRepository(log_limit=0)


def test_job_to_dict_serializes_enums_and_logs():
    job = _job()
    job.logs.append(_entry("hello"))
    data = job.to_dict()

    assert data["mode"] == "draft"
    assert data["status"] == "pending"
    assert data["logs"][0]["message"] == "hello"
    assert data["created_at"].endswith("+00:00")
