"""
Result projector - shapes a job record into the public status payload.
"""

from typing import Any, Dict, Optional

from shortreel.config import LOG_TAIL
from shortreel.models.status import JobStatus
from shortreel.services.infrastructure.storage.job_repository import Job

DRAFT_ARTIFACTS = ("draft", "no_voice", "script_file")


def project_job(job: Job, log_tail: Optional[int] = None) -> Dict[str, Any]:
    """
    Build the externally observable view of ``job``.

    Always carries id, status, mode, progress and the log tail (newest last).
    Completed jobs add their artifact refs and flattened script; failed jobs
    add the error message only.
    """
    tail = LOG_TAIL if log_tail is None else max(log_tail, 0)
    logs = list(job.logs)[-tail:] if tail else []

    payload: Dict[str, Any] = {
        "job_id": job.id,
        "status": job.status.value,
        "mode": job.mode.value,
        "progress": job.progress,
        "logs": [entry.to_dict() for entry in logs],
    }

    if job.status is JobStatus.COMPLETED and job.result is not None:
        payload.update(_project_result(job))
    elif job.status is JobStatus.ERROR:
        payload["error"] = job.error or job.progress

    return payload


def _project_result(job: Job) -> Dict[str, Any]:
    result = job.result or {}
    artifacts = result.get("artifacts", {})
    script = result.get("script", {})

    shaped: Dict[str, Any] = {}
    if job.mode.is_draft:
        for name in DRAFT_ARTIFACTS:
            if name in artifacts:
                shaped[name] = artifacts[name]
    elif "video" in artifacts:
        shaped["video"] = artifacts["video"]

    shaped.update(
        script_text=script.get("script", ""),
        hook=script.get("hook", ""),
        mid_hook=script.get("mid_hook", ""),
        cta=script.get("cta", ""),
        hashtags=list(script.get("hashtags", [])),
        keywords=list(script.get("keywords", [])),
        captions=list(script.get("captions", [])),
        warnings=list(result.get("warnings", [])),
    )
    if result.get("audio_provider"):
        shaped["audio_provider"] = result["audio_provider"]
    return shaped
