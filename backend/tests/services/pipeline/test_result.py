from shortreel.models.status import JobMode, JobStatus
from shortreel.services.infrastructure.storage.job_repository import Job, LogEntry, utcnow
from shortreel.services.pipeline.result import project_job


def _job(mode=JobMode.FINAL, **kwargs) -> Job:
    return Job(id="f" * 32, topic="Volcanoes", duration=30, mode=mode, **kwargs)


def _result(artifacts):
    return {
        "mode": "final",
        "artifacts": artifacts,
        "script": {
            "hook": "Boom.",
            "body": "Magma rises.",
            "mid_hook": "",
            "cta": "Follow!",
            "script": "Boom. Magma rises. Follow!",
            "captions": [{"text": "Boom.", "start_time": 0.0, "duration": 2.0}],
            "hashtags": ["#volcano"],
            "keywords": ["lava"],
        },
        "warnings": ["No voice service configured; continuing without audio"],
        "audio_provider": None,
    }


def test_pending_job_has_base_fields_only():
    view = project_job(_job())
    assert view == {
        "job_id": "f" * 32,
        "status": "pending",
        "mode": "final",
        "progress": "Job created",
        "logs": [],
    }


def test_log_tail_newest_last():
    job = _job()
    for i in range(5):
        job.logs.append(LogEntry(utcnow(), "info", f"line {i}"))

    view = project_job(job, log_tail=2)
    assert [entry["message"] for entry in view["logs"]] == ["line 3", "line 4"]
    assert project_job(job, log_tail=0)["logs"] == []


def test_completed_final_job():
    artifacts = {"video": {"url": "/api/video/download/v.mp4", "path": "/x/v.mp4", "filename": "v.mp4", "category": "videos"}}
    job = _job(status=JobStatus.COMPLETED, result=_result(artifacts))

    view = project_job(job)

    assert view["video"]["filename"] == "v.mp4"
    assert view["script_text"] == "Boom. Magma rises. Follow!"
    assert view["hook"] == "Boom."
    assert view["cta"] == "Follow!"
    assert view["hashtags"] == ["#volcano"]
    assert view["keywords"] == ["lava"]
    assert view["captions"][0]["text"] == "Boom."
    assert view["warnings"]
    assert "error" not in view
    assert "audio_provider" not in view


def test_completed_draft_job_exposes_only_draft_refs():
    artifacts = {
        "no_voice": {"filename": "a"},
        "script_file": {"filename": "b"},
        "video": {"filename": "stray"},
    }
    job = _job(mode=JobMode.DRAFT, status=JobStatus.COMPLETED, result=_result(artifacts))

    view = project_job(job)

    assert view["no_voice"] == {"filename": "a"}
    assert view["script_file"] == {"filename": "b"}
    assert "draft" not in view
    assert "video" not in view


def test_failed_job_exposes_message_only():
    job = _job(status=JobStatus.ERROR, error="Script generation timed out")
    view = project_job(job)
    assert view["error"] == "Script generation timed out"
    assert "script_text" not in view
