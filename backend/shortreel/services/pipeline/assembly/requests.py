"""
Typed requests for media operations.

Each request names its output file explicitly, so the caller decides where
artifacts live and can track them for cleanup.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from shortreel.config import PLACEHOLDER_COLOR
from shortreel.models.script import Caption


class KenBurnsEffect(Enum):
    ZOOM_IN = "zoom-in"
    ZOOM_OUT = "zoom-out"
    PAN_LEFT = "pan-left"
    PAN_RIGHT = "pan-right"

    @classmethod
    def for_index(cls, index: int) -> "KenBurnsEffect":
        """Round-robin over the effects in declaration order."""
        effects = list(cls)
        return effects[index % len(effects)]


@dataclass(frozen=True)
class SegmentRequest:
    image: Path
    duration: float
    effect: KenBurnsEffect
    output: Path


@dataclass(frozen=True)
class SlideshowRequest:
    images: List[Path]
    total_duration: float
    output: Path


@dataclass(frozen=True)
class PlaceholderRequest:
    duration: float
    output: Path
    color: str = PLACEHOLDER_COLOR


@dataclass(frozen=True)
class MuxRequest:
    video: Path
    audio: Path
    output: Path
    captions: List[Caption] = field(default_factory=list)


@dataclass(frozen=True)
class CaptionBurnRequest:
    video: Path
    output: Path
    captions: List[Caption] = field(default_factory=list)


@dataclass(frozen=True)
class ConcatRequest:
    segments: List[Path]
    output: Path
    total_duration: Optional[float] = None


@dataclass(frozen=True)
class ReplaceVoiceRequest:
    """Swap the audio track of an already rendered video."""

    video: Path
    audio: Path
    output: Path
