"""Video assembly - Ken Burns slideshows, muxing and captions via ffmpeg."""

from .ffmpeg import FFmpegMediaAssembler, run_ffmpeg
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
from .subtitles import build_srt, build_transcript, format_srt_timestamp

__all__ = [
    "FFmpegMediaAssembler",
    "run_ffmpeg",
    "CaptionBurnRequest",
    "ConcatRequest",
    "KenBurnsEffect",
    "MuxRequest",
    "PlaceholderRequest",
    "ReplaceVoiceRequest",
    "SegmentRequest",
    "SlideshowRequest",
    "build_srt",
    "build_transcript",
    "format_srt_timestamp",
]
