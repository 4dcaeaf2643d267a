"""
Retention sweeper.

Evicts expired jobs from the registry and deletes the temp artifacts they
owned, plus any temp file older than the temp retention window. Also backs
the manual cleanup endpoints.
"""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from shortreel.config import (
    ARTIFACT_DIRS,
    JOB_RETENTION_HOURS,
    SWEEP_INTERVAL_MINUTES,
    TEMP_DIR,
    TEMP_RETENTION_HOURS,
)
from shortreel.core.logging import get_logger
from shortreel.services.infrastructure.orchestration.job_manager import JobManager

logger = get_logger(__name__, component="retention")


def _hours_since(unix_ts: float, now_ts: float) -> float:
    return max(0.0, (now_ts - unix_ts) / 3600.0)


def _remove_files(paths: Iterable[Path]) -> int:
    removed = 0
    for path in paths:
        try:
            if path.is_file():
                path.unlink(missing_ok=True)
                removed += 1
        except OSError as exc:
            logger.warning("Failed to remove file", extra={"path": str(path), "error": str(exc)})
    return removed


class RetentionSweeper:
    """Time-based cleanup of jobs and files."""

    def __init__(
        self,
        job_manager: JobManager,
        temp_dir: Path = TEMP_DIR,
        output_dirs: Optional[Dict[str, Path]] = None,
        job_retention_hours: float = JOB_RETENTION_HOURS,
        temp_retention_hours: float = TEMP_RETENTION_HOURS,
        interval_minutes: int = SWEEP_INTERVAL_MINUTES,
    ):
        self.job_manager = job_manager
        self.temp_dir = Path(temp_dir)
        self.output_dirs = dict(output_dirs if output_dirs is not None else ARTIFACT_DIRS)
        self.job_retention_hours = job_retention_hours
        self.temp_retention_hours = temp_retention_hours
        self.interval_minutes = interval_minutes

    def cleanup_job_files(self, job_id: str, include_outputs: bool = False) -> int:
        """Delete the temp files a job owns, and optionally its final outputs."""
        if not job_id:
            return 0
        deleted = 0
        if self.temp_dir.exists():
            deleted += _remove_files(self.temp_dir.glob(f"*{job_id}*"))
        if include_outputs:
            for directory in self.output_dirs.values():
                if directory.exists():
                    deleted += _remove_files(directory.glob(f"video_{job_id}*"))
        return deleted

    def cleanup_temp_files(self, max_age_hours: Optional[float] = None) -> int:
        """Delete temp files whose mtime is at least ``max_age_hours`` old."""
        max_age_hours = self.temp_retention_hours if max_age_hours is None else max_age_hours
        if not self.temp_dir.exists():
            return 0

        now_ts = datetime.now().timestamp()
        stale = []
        for path in self.temp_dir.iterdir():
            try:
                if path.is_file() and _hours_since(path.stat().st_mtime, now_ts) >= max_age_hours:
                    stale.append(path)
            except OSError:
                continue
        return _remove_files(stale)

    def run_once(self) -> Dict[str, Any]:
        """Run one sweep pass and return summary statistics."""
        summary: Dict[str, Any] = {
            "swept_jobs": 0,
            "deleted_job_files": 0,
            "deleted_temp_files": 0,
            "errors": 0,
        }

        removed: List[str] = []
        try:
            removed = self.job_manager.sweep(timedelta(hours=self.job_retention_hours))
        except Exception as exc:
            logger.error("Job sweep failed", extra={"error": str(exc)}, exc_info=True)
            summary["errors"] += 1
        summary["swept_jobs"] = len(removed)

        for job_id in removed:
            summary["deleted_job_files"] += self.cleanup_job_files(job_id)

        try:
            summary["deleted_temp_files"] = self.cleanup_temp_files()
        except Exception as exc:
            logger.error("Temp cleanup failed", extra={"error": str(exc)}, exc_info=True)
            summary["errors"] += 1

        logger.info("Retention sweep complete", extra=summary)
        return summary

    async def run_periodic(self) -> None:
        """Run sweeps in a periodic background loop."""
        interval_seconds = self.interval_minutes * 60
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("Retention loop failed", extra={"error": str(exc)}, exc_info=True)
