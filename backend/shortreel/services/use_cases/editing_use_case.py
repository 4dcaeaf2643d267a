"""
Editing use cases - re-voice or re-render an existing video.

Uploaded files are saved by the route and handed over as paths; the route
deletes them afterwards. Results are new files in the videos directory. A
finished job's record is never rewritten: regeneration only appends to its
log.
"""

import asyncio
import json
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from shortreel.config import ARTIFACT_DIRS, ASSEMBLY_TIMEOUT_SECONDS, TEMP_DIR, VIDEOS_DIR
from shortreel.core.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from shortreel.core.logging import get_logger
from shortreel.core.security import secure_file_path
from shortreel.models.script import ArtifactRef, Caption
from shortreel.models.status import JobStatus
from shortreel.services.infrastructure.orchestration import JobManager
from shortreel.services.infrastructure.storage.job_repository import Job
from shortreel.services.pipeline.assembly import (
    CaptionBurnRequest,
    FFmpegMediaAssembler,
    MuxRequest,
    ReplaceVoiceRequest,
    SlideshowRequest,
)

from .base import UseCase

logger = get_logger(__name__, component="editing")

# Primary artifact of a finished job, by preference
PRIMARY_ARTIFACTS = ("video", "draft", "no_voice")


@dataclass
class VoiceReplacement:
    """A rendered artifact (category + filename) and the new voice track."""
    filename: str
    audio: Path
    category: str = "videos"


@dataclass
class Regeneration:
    job_id: str
    images: List[Path] = field(default_factory=list)
    audio: Optional[Path] = None
    captions: Optional[str] = None


def parse_captions(raw: Optional[str]) -> Optional[List[Caption]]:
    """Decode a JSON caption list from a form field; None when absent."""
    if raw is None or not raw.strip():
        return None
    try:
        items = json.loads(raw)
        if not isinstance(items, list):
            raise ValueError("expected a list")
        return [Caption.from_dict(item) for item in items if isinstance(item, dict)]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Captions must be a JSON list of captions: {exc}") from exc


async def _run_media(awaitable, timeout: float, label: str) -> Path:
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise ServiceUnavailableError(f"{label} timed out") from None


def _stamp() -> str:
    return f"{int(time.time() * 1000)}_{secrets.token_hex(3)}"


class ReplaceVoiceUseCase(UseCase[VoiceReplacement, Dict[str, Any]]):
    """Mux an existing artifact with a new voice; the output length follows the video."""

    def __init__(
        self,
        assembler: Optional[FFmpegMediaAssembler] = None,
        artifact_dirs: Optional[Dict[str, Path]] = None,
        output_dir: Path = VIDEOS_DIR,
        timeout: float = ASSEMBLY_TIMEOUT_SECONDS,
    ):
        self.assembler = assembler or FFmpegMediaAssembler()
        self.artifact_dirs = dict(artifact_dirs if artifact_dirs is not None else ARTIFACT_DIRS)
        self.output_dir = Path(output_dir)
        self.timeout = timeout

    async def execute(self, request: VoiceReplacement) -> Dict[str, Any]:
        directory = self.artifact_dirs.get(request.category)
        if directory is None or request.category == "scripts":
            raise ValidationError(f"Cannot replace the voice of a '{request.category}' artifact")
        video = secure_file_path(directory, request.filename)
        if video is None or not video.is_file():
            raise NotFoundError("Video not found")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output = self.output_dir / f"video_replaced_voice_{_stamp()}.mp4"
        try:
            await _run_media(
                self.assembler.replace_voice(ReplaceVoiceRequest(video=video, audio=request.audio, output=output)),
                self.timeout,
                "Voice replacement",
            )
        except BaseException:
            output.unlink(missing_ok=True)
            raise

        logger.info("Voice replaced", extra={"source": video.name, "output": output.name})
        ref = ArtifactRef(filename=output.name, path=str(output), category="videos")
        return {"success": True, "video": ref.to_dict()}


class RegenerateVideoUseCase(UseCase[Regeneration, Dict[str, Any]]):
    """
    Re-render a completed job with new images and/or a new voice.

    New images rebuild the Ken Burns slideshow for the job's duration and
    burn in the captions (edited ones if supplied, else the job's). A voice
    alone is muxed onto the job's existing video, which already carries its
    captions, so caption edits need new images.
    """

    def __init__(
        self,
        job_manager: JobManager,
        assembler: Optional[FFmpegMediaAssembler] = None,
        output_dir: Path = VIDEOS_DIR,
        temp_dir: Path = TEMP_DIR,
        timeout: float = ASSEMBLY_TIMEOUT_SECONDS,
    ):
        self.job_manager = job_manager
        self.temp_dir = Path(temp_dir)
        self.assembler = assembler or FFmpegMediaAssembler(work_dir=self.temp_dir)
        self.output_dir = Path(output_dir)
        self.timeout = timeout

    def _source_video(self, job: Job) -> Path:
        artifacts = (job.result or {}).get("artifacts", {})
        for name in PRIMARY_ARTIFACTS:
            ref = artifacts.get(name)
            if ref and Path(ref["path"]).is_file():
                return Path(ref["path"])
        raise NotFoundError("The job's video is no longer available")

    @staticmethod
    def _job_captions(job: Job) -> List[Caption]:
        script = (job.result or {}).get("script", {})
        return [Caption.from_dict(item) for item in script.get("captions", [])]

    async def execute(self, request: Regeneration) -> Dict[str, Any]:
        job = self.job_manager.get_job(request.job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.status is not JobStatus.COMPLETED:
            raise ConflictError(f"Job is {job.status.value}; only completed jobs can be regenerated")
        if not request.images and request.audio is None:
            raise ValidationError("Provide new images or a new audio file")

        captions = parse_captions(request.captions)
        if captions is not None and not request.images:
            raise ValidationError("Editing captions requires new images")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output = self.output_dir / f"video_{job.id}_regenerated_{_stamp()}.mp4"
        slideshow: Optional[Path] = None
        try:
            if request.images:
                self.temp_dir.mkdir(parents=True, exist_ok=True)
                slideshow = self.temp_dir / f"{job.id}_{_stamp()}_regenerate.mp4"
                await _run_media(
                    self.assembler.assemble_slideshow(
                        SlideshowRequest(images=list(request.images), total_duration=float(job.duration), output=slideshow)
                    ),
                    self.timeout,
                    "Slideshow assembly",
                )
                if captions is None:
                    captions = self._job_captions(job)
                if request.audio is not None:
                    media = self.assembler.mux_audio_video(
                        MuxRequest(video=slideshow, audio=request.audio, output=output, captions=captions)
                    )
                else:
                    media = self.assembler.burn_captions(
                        CaptionBurnRequest(video=slideshow, output=output, captions=captions)
                    )
            else:
                media = self.assembler.replace_voice(
                    ReplaceVoiceRequest(video=self._source_video(job), audio=request.audio, output=output)
                )
            await _run_media(media, self.timeout, "Video regeneration")
        except BaseException:
            output.unlink(missing_ok=True)
            raise
        finally:
            # Slideshow, segments, concat list and caption files
            stems = [output.stem] + ([slideshow.stem] if slideshow is not None else [])
            for stem in stems:
                for leftover in self.temp_dir.glob(f"{stem}*"):
                    leftover.unlink(missing_ok=True)

        self.job_manager.append_log(job.id, f"Regenerated video: {output.name}")
        ref = ArtifactRef(filename=output.name, path=str(output), category="videos")
        return {"success": True, "job_id": job.id, "video": ref.to_dict()}
