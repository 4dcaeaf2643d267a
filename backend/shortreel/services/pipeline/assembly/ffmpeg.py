"""
FFmpeg media assembler

Command builders are pure functions so they can be tested without ffmpeg;
FFmpegMediaAssembler runs them through asyncio subprocesses and translates
every failure into AssemblyFailed.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

from shortreel.config import TEMP_DIR, VIDEO_FPS, VIDEO_HEIGHT, VIDEO_WIDTH
from shortreel.core.exceptions import AssemblyFailed
from shortreel.core.logging import get_logger

from .requests import (
    CaptionBurnRequest,
    ConcatRequest,
    KenBurnsEffect,
    MuxRequest,
    PlaceholderRequest,
    ReplaceVoiceRequest,
    SegmentRequest,
    SlideshowRequest,
)
from .subtitles import build_caption_filter, build_srt, write_caption_files

logger = get_logger(__name__, component="ffmpeg")

ENCODE_ARGS = ["-c:v", "libx264", "-preset", "medium", "-crf", "23", "-pix_fmt", "yuv420p"]


def _fmt(seconds: float) -> str:
    return f"{seconds:.3f}"


def ken_burns_filter(effect: KenBurnsEffect, frames: int, width: int, height: int, fps: int) -> str:
    """Scale to cover a 2x canvas, then zoompan down to the output size."""
    cover = (
        f"scale={width * 2}:{height * 2}:force_original_aspect_ratio=increase,"
        f"crop={width * 2}:{height * 2}"
    )
    frames = max(frames, 1)
    centre_x = "iw/2-(iw/zoom/2)"
    centre_y = "ih/2-(ih/zoom/2)"

    if effect is KenBurnsEffect.ZOOM_IN:
        zoom, x, y = "min(zoom+0.0015,1.5)", centre_x, centre_y
    elif effect is KenBurnsEffect.ZOOM_OUT:
        zoom, x, y = "if(eq(on,0),1.5,max(zoom-0.0015,1.0))", centre_x, centre_y
    elif effect is KenBurnsEffect.PAN_LEFT:
        zoom, x, y = "1.3", f"(iw-iw/zoom)*(1-on/{frames})", centre_y
    else:
        zoom, x, y = "1.3", f"(iw-iw/zoom)*on/{frames}", centre_y

    return f"{cover},zoompan=z='{zoom}':x='{x}':y='{y}':d={frames}:s={width}x{height}:fps={fps}"


def build_segment_command(request: SegmentRequest, width: int, height: int, fps: int) -> List[str]:
    frames = int(round(request.duration * fps))
    return [
        "ffmpeg", "-y",
        "-i", str(request.image),
        "-vf", ken_burns_filter(request.effect, frames, width, height, fps),
        *ENCODE_ARGS,
        "-r", str(fps),
        "-t", _fmt(request.duration),
        "-an",
        "-movflags", "+faststart",
        str(request.output),
    ]


def build_concat_command(list_file: Path, output: Path, total_duration: Optional[float]) -> List[str]:
    cmd = ["ffmpeg", "-y", "-f", "concat", "-safe", "0", "-i", str(list_file), "-c", "copy"]
    if total_duration:
        cmd += ["-t", _fmt(total_duration)]
    cmd.append(str(output))
    return cmd


def build_placeholder_command(request: PlaceholderRequest, width: int, height: int, fps: int) -> List[str]:
    return [
        "ffmpeg", "-y",
        "-f", "lavfi",
        "-i", f"color=c={request.color}:size={width}x{height}:duration={_fmt(request.duration)}:rate={fps}",
        *ENCODE_ARGS,
        "-t", _fmt(request.duration),
        "-movflags", "+faststart",
        str(request.output),
    ]


def build_mux_command(
    video: Path,
    audio: Path,
    output: Path,
    caption_filter: str = "",
    subtitle_file: Optional[Path] = None,
) -> List[str]:
    cmd = ["ffmpeg", "-y", "-i", str(video), "-i", str(audio)]
    if subtitle_file is not None:
        cmd += ["-i", str(subtitle_file)]
    cmd += ["-map", "0:v:0", "-map", "1:a:0"]
    if subtitle_file is not None:
        cmd += ["-map", "2:s:0", "-c:s", "mov_text"]
    if caption_filter:
        cmd += ["-vf", caption_filter, *ENCODE_ARGS]
    else:
        cmd += ["-c:v", "copy"]
    cmd += ["-c:a", "aac", "-b:a", "192k", "-shortest", "-movflags", "+faststart", str(output)]
    return cmd


def build_caption_burn_command(video: Path, output: Path, caption_filter: str = "") -> List[str]:
    cmd = ["ffmpeg", "-y", "-i", str(video)]
    if caption_filter:
        cmd += ["-vf", caption_filter, *ENCODE_ARGS]
    else:
        cmd += ["-c:v", "copy"]
    cmd += ["-an", "-movflags", "+faststart", str(output)]
    return cmd


def build_replace_voice_command(video: Path, audio: Path, output: Path) -> List[str]:
    """Keep the video stream; the new audio is padded with silence or cut to the video length."""
    return [
        "ffmpeg", "-y",
        "-i", str(video),
        "-i", str(audio),
        "-filter_complex", "[1:a]apad[voice]",
        "-map", "0:v:0", "-map", "[voice]",
        "-c:v", "copy",
        "-c:a", "aac", "-b:a", "192k",
        "-shortest",
        "-movflags", "+faststart",
        str(output),
    ]


def write_concat_list(
segments: Sequence[Path], list_file: Path) -> Path:
    lines = []
    for segment in segments:
        escaped = str(Path(segment).resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    list_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_file


async def run_ffmpeg(cmd: List[str], stage: str, output: Path) -> Path:
    """Run one ffmpeg command; the subprocess is killed if the caller is cancelled."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise AssemblyFailed(stage, "ffmpeg executable not found") from exc

    try:
        _, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    if process.returncode != 0:
        tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
        raise AssemblyFailed(stage, f"ffmpeg exited with {process.returncode}: {' | '.join(tail)}")
    if not output.exists() or output.stat().st_size == 0:
        raise AssemblyFailed(stage, f"ffmpeg produced no output at {output.name}")
    return output


class FFmpegMediaAssembler:
    """Vertical slideshow assembly, muxing and caption burning.

    Side files (segments, concat lists, caption text, SRT) are written to
    ``work_dir`` and named after the output file's stem.
    """

    def __init__(
        self,
        work_dir: Path = TEMP_DIR,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        fps: int = VIDEO_FPS,
    ):
        self.work_dir = Path(work_dir)
        self.width = width
        self.height = height
        self.fps = fps

    def _side_file(self, output: Path, suffix: str) -> Path:
        self.work_dir.mkdir(parents=True, exist_ok=True)
        return self.work_dir / f"{output.stem}{suffix}"

    async def render_segment(self, request: SegmentRequest) -> Path:
        if not request.image.exists():
            raise AssemblyFailed("segment", f"image not found: {request.image.name}")
        cmd = build_segment_command(request, self.width, self.height, self.fps)
        return await run_ffmpeg(cmd, "segment", request.output)

    async def concat_segments(self, request: ConcatRequest) -> Path:
        if not request.segments:
            raise AssemblyFailed("concat", "no segments to concatenate")
        list_file = write_concat_list(
            request.segments,
            self._side_file(request.output, "_concat.txt"),
        )
        cmd = build_concat_command(list_file, request.output, request.total_duration)
        return await run_ffmpeg(cmd, "concat", request.output)

    async def assemble_slideshow(self, request: SlideshowRequest) -> Path:
        """One Ken Burns segment per image, concatenated to ``total_duration``."""
        if not request.images:
            raise AssemblyFailed("slideshow", "no images provided")

        per_image = request.total_duration / len(request.images)
        segments = []
        for index, image in enumerate(request.images):
            segment = self._side_file(request.output, f"_seg{index}.mp4")
            await self.render_segment(
                SegmentRequest(
                    image=image,
                    duration=per_image,
                    effect=KenBurnsEffect.for_index(index),
                    output=segment,
                )
            )
            segments.append(segment)

        logger.info("Rendered slideshow segments", extra={"segments": len(segments)})
        return await self.concat_segments(
            ConcatRequest(segments=segments, output=request.output, total_duration=request.total_duration)
        )

    async def sound_fallback(self, request: PlaceholderRequest) -> Path:
        """Solid-colour video for when no images are available."""
        cmd = build_placeholder_command(request, self.width, self.height, self.fps)
        return await run_ffmpeg(cmd, "placeholder", request.output)

    def _caption_filter(self, captions, output: Path) -> str:
        if not captions:
            return ""
        files = write_caption_files(captions, self._side_file(output, ""))
        return build_caption_filter(files)

    async def mux_audio_video(self, request: MuxRequest) -> Path:
        """Audio + video, captions burned in and attached as a soft subtitle track."""
        subtitle_file = None
        if request.captions:
            subtitle_file = self._side_file(request.output, ".srt")
            subtitle_file.write_text(build_srt(request.captions), encoding="utf-8")
        cmd = build_mux_command(
            request.video,
            request.audio,
            request.output,
            caption_filter=self._caption_filter(request.captions, request.output),
            subtitle_file=subtitle_file,
        )
        return await run_ffmpeg(cmd, "mux", request.output)

    async def burn_captions(self, request: CaptionBurnRequest) -> Path:
        """Captions burned in, no audio track."""
        cmd = build_caption_burn_command(
            request.video,
            request.output,
            caption_filter=self._caption_filter(request.captions, request.output),
        )
        return await run_ffmpeg(cmd, "captions", request.output)

    async def replace_voice(self, request: ReplaceVoiceRequest) -> Path:
        """Re-mux ``video`` with a new voice track."""
        for source in (request.video, request.audio):
            if not source.exists():
                raise AssemblyFailed("replace_voice", f"input not found: {source.name}")
        cmd = build_replace_voice_command(request.video, request.audio, request.output)
        return await run_ffmpeg(cmd, "replace_voice", request.output)
