r"""
Pipeline orchestrator - the per-job state machine.

    pending -> scripting -> voicing -> imaging -> assembling -> muxing -> completed
                   \___________\__________\___________\___________\----> error

Scripting and final assembly are fatal on failure. Voice, images and audio
muxing degrade: the job continues and the degradation is recorded as a
warning. Intermediate files are deleted once the job is terminal.
"""

import asyncio
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from shortreel.config import (
    ARTIFACT_DIRS,
    ASSEMBLY_TIMEOUT_SECONDS,
    IMAGE_TIMEOUT_SECONDS,
    MAX_PIPELINE_IMAGES,
    SCRIPT_TIMEOUT_SECONDS,
    TEMP_DIR,
    VOICE_TIMEOUT_SECONDS,
)
from shortreel.core.exceptions import (
    AssemblyFailed,
    DegradedStageError,
    FatalStageError,
    GenerationFailed,
    ImageDownloadFailed,
    ImageSearchFailed,
    JobCancelled,
    SynthesisFailed,
)
from shortreel.core.logging import LogTimer, get_logger
from shortreel.models.script import ArtifactRef, ScriptData
from shortreel.models.status import JobStatus
from shortreel.services.capabilities.config import CapabilityConfig
from shortreel.services.capabilities.selector import (
    build_image_search,
    select_script_generator,
    select_voice_synthesizers,
)
from shortreel.services.infrastructure.orchestration.job_manager import JobManager
from shortreel.services.infrastructure.orchestration.runner import CancellationToken
from shortreel.services.infrastructure.storage.job_repository import Job

from .assembly.ffmpeg import FFmpegMediaAssembler
from .assembly.requests import CaptionBurnRequest, MuxRequest, PlaceholderRequest, SlideshowRequest
from .assembly.subtitles import build_transcript
from .images.base import download_image

logger = get_logger(__name__, component="orchestrator")

T = TypeVar("T")


@dataclass
class StageTimeouts:
    script: float = SCRIPT_TIMEOUT_SECONDS
    voice: float = VOICE_TIMEOUT_SECONDS
    image: float = IMAGE_TIMEOUT_SECONDS
    assembly: float = ASSEMBLY_TIMEOUT_SECONDS


@dataclass
class PipelineDependencies:
    """Adapters for one job run."""

    script_generator: Any
    voice_synthesizers: List[Any]
    image_search: Any
    assembler: Any
    download: Callable[[str, Path], Awaitable[Path]] = download_image

    @classmethod
    def from_config(cls, config: CapabilityConfig, work_dir: Path = TEMP_DIR) -> "PipelineDependencies":
        return cls(
            script_generator=select_script_generator(config),
            voice_synthesizers=select_voice_synthesizers(config),
            image_search=build_image_search(config),
            assembler=FFmpegMediaAssembler(work_dir=work_dir),
        )


def _describe(exc: BaseException) -> str:
    return str(exc) or "timed out"


def default_dependencies() -> PipelineDependencies:
    # Re-read per job so credential changes apply without a restart
    return PipelineDependencies.from_config(CapabilityConfig.from_env())


@dataclass
class _RunContext:
    job: Job
    token: CancellationToken
    dependencies: Optional[PipelineDependencies] = None
    artifacts: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    audio_provider: Optional[str] = None

    @property
    def job_id(self) -> str:
        return self.job.id


class PipelineOrchestrator:
    """Drives one job through every stage and records the outcome on the registry."""

    def __init__(
        self,
        job_manager: JobManager,
        dependencies_factory: Callable[[], PipelineDependencies] = default_dependencies,
        temp_dir: Path = TEMP_DIR,
        output_dirs: Optional[Dict[str, Path]] = None,
        timeouts: Optional[StageTimeouts] = None,
        max_images: int = MAX_PIPELINE_IMAGES,
    ):
        self.job_manager = job_manager
        self.dependencies_factory = dependencies_factory
        self.temp_dir = Path(temp_dir)
        self.output_dirs = dict(output_dirs if output_dirs is not None else ARTIFACT_DIRS)
        self.timeouts = timeouts or StageTimeouts()
        self.max_images = max_images

    # ------------------------------------------------------------------ helpers

    def _enter(self, ctx: _RunContext, status: JobStatus, progress: str) -> None:
        ctx.token.raise_if_cancelled()
        self.job_manager.update_job(ctx.job_id, status=status, progress=progress)
        self.job_manager.append_log(ctx.job_id, progress)

    def _log(self, ctx: _RunContext, message: str, level: str = "info") -> None:
        self.job_manager.append_log(ctx.job_id, message, level)

    def _degrade(self, ctx: _RunContext, error: DegradedStageError) -> None:
        ctx.warnings.append(error.message)
        self._log(ctx, error.message, "warning")
        logger.warning("Stage degraded", extra={"job": ctx.job_id, "stage": error.stage})

    def _temp_path(self, ctx: _RunContext, label: str, extension: str) -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        stamp = int(time.time() * 1000)
        path = self.temp_dir / f"{ctx.job_id}_{stamp}_{secrets.token_hex(3)}_{label}.{extension}"
        ctx.artifacts.append(path)
        return path

    def _output_path(self, category: str, filename: str) -> Path:
        directory = self.output_dirs[category]
        directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    @staticmethod
    def _ref(path: Path, category: str) -> ArtifactRef:
        return ArtifactRef(filename=path.name, path=str(path), category=category)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            pass

    async def _call(self, ctx: _RunContext, awaitable: Awaitable[T], timeout: float) -> T:
        return await ctx.token.guard(awaitable, timeout)

    # ------------------------------------------------------------------ run

    async def run(self, job_id: str, token: Optional[CancellationToken] = None) -> None:
        """Drive ``job_id`` to a terminal state. Never raises except on task cancellation."""
        job = self.job_manager.get_job(job_id)
        if job is None:
            logger.warning("Job vanished before the pipeline started", extra={"job": job_id})
            return
        if job.status.is_terminal():
            return

        ctx = _RunContext(job=job, token=token or CancellationToken())
        try:
            ctx.dependencies = self.dependencies_factory()
            with LogTimer(logger, f"pipeline {job.mode.value} ({job.duration}s)"):
                script = await self._scripting(ctx)
                audio = await self._voicing(ctx, script)
                images = await self._imaging(ctx, script)
                video = await self._assembling(ctx, images)
                artifacts = await self._muxing(ctx, script, video, audio)
            self._complete(ctx, script, artifacts, len(images))
        except JobCancelled as exc:
            self._fail(ctx, str(exc))
        except FatalStageError as exc:
            self._fail(ctx, exc.message)
        except asyncio.CancelledError:
            self._fail(ctx, "Job cancelled")
            raise
        except Exception as exc:
            logger.error("Unexpected pipeline failure", extra={"job": job_id, "error": str(exc)}, exc_info=True)
            self._fail(ctx, f"Unexpected error: {exc}")
        finally:
            self._cleanup(ctx)

    def _complete(self, ctx: _RunContext, script: ScriptData, artifacts: Dict[str, ArtifactRef], image_count: int) -> None:
        result = {
            "mode": ctx.job.mode.value,
            "artifacts": {name: ref.to_dict() for name, ref in artifacts.items()},
            "script": script.to_dict(),
            "warnings": list(ctx.warnings),
            "audio_provider": ctx.audio_provider,
            "image_count": image_count,
        }
        message = "Video created successfully"
        if ctx.warnings:
            message = f"{message} with {len(ctx.warnings)} warning(s)"
        self.job_manager.update_job(ctx.job_id, status=JobStatus.COMPLETED, progress=message, result=result)
        self._log(ctx, message)

    def _fail(self, ctx: _RunContext, message: str) -> None:
        self.job_manager.update_job(ctx.job_id, status=JobStatus.ERROR, progress=message, error=message)
        self._log(ctx, message, "error")

    def _cleanup(self, ctx: _RunContext) -> None:
        """Delete every intermediate file; final outputs live outside ``temp_dir``."""
        leftovers = set(ctx.artifacts)
        try:
            leftovers.update(self.temp_dir.glob(f"*{ctx.job_id}*"))
        except OSError:
            pass
        for path in leftovers:
            self._discard(path)

    # ------------------------------------------------------------------ stages

    async def _scripting(self, ctx: _RunContext) -> ScriptData:
        job = ctx.job
        supplied = job.options.get("script_data")
        if supplied:
            self._enter(ctx, JobStatus.SCRIPTING, "Using provided script")
            if not isinstance(supplied, dict):
                raise FatalStageError("scripting", "Provided script_data must be an object")
            try:
                script = ScriptData.from_dict(supplied)
            except (TypeError, ValueError) as exc:
                raise FatalStageError("scripting", "Provided script_data is invalid") from exc
            if not script.hook and not script.body:
                raise FatalStageError("scripting", "Provided script_data has no narration")
            self._log(ctx, "Script accepted")
            return script

        self._enter(ctx, JobStatus.SCRIPTING, "Generating script...")
        deps = ctx.dependencies
        if deps.script_generator is None:
            raise FatalStageError("scripting", "No script generator configured")
        try:
            script = await self._call(ctx, deps.script_generator.generate(job.topic, job.duration), self.timeouts.script)
        except GenerationFailed as exc:
            raise FatalStageError("scripting", str(exc)) from exc
        except asyncio.TimeoutError as exc:
            raise FatalStageError("scripting", "Script generation timed out") from exc
        self._log(ctx, f"Script generated ({len(script.captions)} captions, {len(script.keywords)} keywords)")
        return script

    async def _voicing(self, ctx: _RunContext, script: ScriptData) -> Optional[Path]:
        self._enter(ctx, JobStatus.VOICING, "Generating voice...")
        synthesizers = ctx.dependencies.voice_synthesizers
        if not synthesizers:
            self._degrade(ctx, DegradedStageError("voicing", "No voice service configured; continuing without audio"))
            return None

        synthesizer = synthesizers[0]
        output = self._temp_path(ctx, "voice", synthesizer.file_extension)
        try:
            audio = await self._call(ctx, synthesizer.synthesize(script.script, output), self.timeouts.voice)
        except SynthesisFailed as exc:
            self._degrade(
                ctx,
                DegradedStageError("voicing", f"Voice synthesis failed ({exc.reason}): {exc}; continuing without audio"),
            )
            return None
        except asyncio.TimeoutError:
            self._degrade(ctx, DegradedStageError("voicing", "Voice synthesis failed (timeout); continuing without audio"))
            return None

        ctx.audio_provider = synthesizer.name
        self._log(ctx, f"Voice generated with {synthesizer.name}")
        return audio

    async def _search(self, ctx: _RunContext, keywords: List[str]) -> List[Any]:
        try:
            return await self._call(
                ctx,
                ctx.dependencies.image_search.search(keywords, self.max_images, ctx.job.topic),
                self.timeouts.image,
            )
        except (ImageSearchFailed, asyncio.TimeoutError) as exc:
            self._log(ctx, f"Image search failed: {_describe(exc)}", "warning")
            return []

    async def _imaging(self, ctx: _RunContext, script: ScriptData) -> List[Path]:
        self._enter(ctx, JobStatus.IMAGING, "Searching images...")

        selected = ctx.job.options.get("selected_image_urls")
        if selected:
            urls = [str(url) for url in selected if url][: self.max_images]
            self._log(ctx, f"Using {len(urls)} selected images")
        else:
            results = await self._search(ctx, script.keywords)
            if not results and script.keywords:
                self._log(ctx, "No images found; retrying with the primary keyword", "warning")
                results = await self._search(ctx, script.keywords[:1])
            urls = [image.url for image in results]

        images: List[Path] = []
        for index, url in enumerate(urls):
            output = self._temp_path(ctx, f"img{index}", "jpg")
            try:
                images.append(await self._call(ctx, ctx.dependencies.download(url, output), self.timeouts.image))
            except (ImageDownloadFailed, asyncio.TimeoutError) as exc:
                self._log(ctx, f"Skipping image {index + 1}: {_describe(exc)}", "warning")

        if images:
            self._log(ctx, f"Downloaded {len(images)} images")
        else:
            self._degrade(ctx, DegradedStageError("imaging", "No images available; using a solid-colour background"))
        return images

    async def _assembling(self, ctx: _RunContext, images: List[Path]) -> Path:
        self._enter(ctx, JobStatus.ASSEMBLING, "Creating video...")
        assembler = ctx.dependencies.assembler
        duration = float(ctx.job.duration)

        def attempt(selection: List[Path], label: str) -> Awaitable[Path]:
            output = self._temp_path(ctx, label, "mp4")
            if selection:
                return assembler.assemble_slideshow(SlideshowRequest(images=selection, total_duration=duration, output=output))
            return assembler.sound_fallback(PlaceholderRequest(duration=duration, output=output))

        try:
            video = await self._call(ctx, attempt(images, "slideshow"), self.timeouts.assembly)
            self._log(ctx, f"Video assembled from {len(images)} images" if images else "Placeholder video created")
            return video
        except (AssemblyFailed, asyncio.TimeoutError) as exc:
            self._degrade(
                ctx,
                DegradedStageError("assembling", f"Video assembly failed ({_describe(exc)}); retrying with a single frame"),
            )

        try:
            video = await self._call(ctx, attempt(images[:1], "fallback"), self.timeouts.assembly)
        except (AssemblyFailed, asyncio.TimeoutError) as exc:
            raise FatalStageError("assembling", f"Video assembly failed: {_describe(exc)}") from exc
        self._log(ctx, "Fallback video assembled")
        return video

    async def _muxing(
        self,
        ctx: _RunContext,
        script: ScriptData,
        video: Path,
        audio: Optional[Path],
    ) -> Dict[str, ArtifactRef]:
        self._enter(ctx, JobStatus.MUXING, "Adding audio and captions...")
        assembler = ctx.dependencies.assembler
        base = f"video_{ctx.job_id}"
        artifacts: Dict[str, ArtifactRef] = {}

        async def render_captioned(output: Path) -> Path:
            try:
                return await self._call(
                    ctx,
                    assembler.burn_captions(CaptionBurnRequest(video=video, output=output, captions=script.captions)),
                    self.timeouts.assembly,
                )
            except (AssemblyFailed, asyncio.TimeoutError) as exc:
                self._discard(output)
                raise FatalStageError("muxing", f"Caption rendering failed: {_describe(exc)}") from exc

        async def render_with_audio(output: Path) -> Optional[Path]:
            try:
                return await self._call(
                    ctx,
                    assembler.mux_audio_video(MuxRequest(video=video, audio=audio, output=output, captions=script.captions)),
                    self.timeouts.assembly,
                )
            except (AssemblyFailed, asyncio.TimeoutError) as exc:
                self._discard(output)
                self._degrade(ctx, DegradedStageError("muxing", f"Audio mux failed ({_describe(exc)}); output has no audio"))
                return None

        if ctx.job.mode.is_draft:
            try:
                if audio is not None:
                    draft = await render_with_audio(self._output_path("draft", f"{base}_draft.mp4"))
                    if draft is not None:
                        artifacts["draft"] = self._ref(draft, "draft")
                no_voice = await render_captioned(self._output_path("no_voice", f"{base}_no_voice.mp4"))
                artifacts["no_voice"] = self._ref(no_voice, "no_voice")
            except (FatalStageError, JobCancelled, asyncio.CancelledError):
                # No result will reference the outputs written so far
                for ref in artifacts.values():
                    self._discard(Path(ref.path))
                raise

            transcript = self._output_path("scripts", f"{base}_script.txt")
            transcript.write_text(build_transcript(script), encoding="utf-8")
            artifacts["script_file"] = self._ref(transcript, "scripts")
            self._log(ctx, f"Draft outputs ready ({len(artifacts)} files)")
            return artifacts

        final_path = self._output_path("videos", f"{base}.mp4")
        final = await render_with_audio(final_path) if audio is not None else None
        if final is None:
            final = await render_captioned(final_path)
        artifacts["video"] = self._ref(final, "videos")
        self._log(ctx, "Final video ready")
        return artifacts
