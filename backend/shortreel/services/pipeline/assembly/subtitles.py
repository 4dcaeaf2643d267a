"""
Caption formatting: SRT files, timed transcripts and drawtext filters.
"""

from pathlib import Path
from typing import List, Sequence, Tuple

from shortreel.models.script import Caption, ScriptData


def format_srt_timestamp(seconds: float) -> str:
    """``HH:MM:SS,mmm``"""
    total_ms = max(0, int(round(seconds * 1000)))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def format_transcript_timestamp(seconds: float) -> str:
    """``MM:SS``"""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def build_srt(captions: Sequence[Caption]) -> str:
    blocks = []
    for index, caption in enumerate(captions, start=1):
        blocks.append(
            f"{index}\n"
            f"{format_srt_timestamp(caption.start_time)} --> {format_srt_timestamp(caption.end_time)}\n"
            f"{caption.text}\n"
        )
    return "\n".join(blocks)


def build_transcript(script: ScriptData) -> str:
    """Plain-text transcript: timed caption lines, then the full narration and hashtags."""
    lines = [
        f"[{format_transcript_timestamp(c.start_time)}-{format_transcript_timestamp(c.end_time)}] {c.text}"
        for c in script.captions
    ]
    sections = []
    if lines:
        sections.append("\n".join(lines))
    sections.append(script.script)
    if script.hashtags:
        sections.append(" ".join(script.hashtags))
    return "\n\n".join(sections) + "\n"


def _escape_filter_path(path: Path) -> str:
    # Backslash, colon and quote are special inside filter option values
    return str(path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")


def write_caption_files(captions: Sequence[Caption], stem: Path) -> List[Tuple[Path, Caption]]:
    """One text file per caption, named ``{stem}_cap{n}.txt``.

    drawtext reads text from files so caption content never needs escaping.
    """
    written = []
    for index, caption in enumerate(captions):
        path = stem.with_name(f"{stem.name}_cap{index}.txt")
        path.write_text(caption.text, encoding="utf-8")
        written.append((path, caption))
    return written


def build_caption_filter(caption_files: Sequence[Tuple[Path, Caption]], font_size: int = 60) -> str:
    """Chain of drawtext filters, each enabled for its caption's window."""
    filters = []
    for path, caption in caption_files:
        filters.append(
            "drawtext="
            f"textfile='{_escape_filter_path(path)}':"
            f"fontsize={font_size}:fontcolor=white:"
            "borderw=3:bordercolor=black:"
            "x=(w-text_w)/2:y=h-th-100:"
            f"enable='between(t,{caption.start_time:.3f},{caption.end_time:.3f})'"
        )
    return ",".join(filters)
