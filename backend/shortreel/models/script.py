"""
Script, image and artifact records shared by the pipeline stages.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

# Fraction of the narration after which the mid-hook is spliced in
MID_HOOK_POSITION = 0.6


@dataclass
class Caption:
    text: str
    start_time: float
    duration: float

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Caption":
        return cls(
            text=str(data.get("text", "")).strip(),
            start_time=float(data.get("start_time", data.get("startTime", 0)) or 0),
            duration=float(data.get("duration", 0) or 0),
        )


@dataclass
class ScriptData:
    """Narration script produced by the script generator."""

    hook: str
    body: str
    mid_hook: str = ""
    cta: str = ""
    captions: List[Caption] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)

    @property
    def script(self) -> str:
        """Full narration: hook and body, mid-hook spliced at 60%, then the CTA."""
        main = " ".join(part for part in (self.hook.strip(), self.body.strip()) if part)
        if self.mid_hook.strip() and main:
            split_at = int(len(main) * MID_HOOK_POSITION)
            # Move to the next word boundary so no word is cut in half
            boundary = main.find(" ", split_at)
            if boundary == -1:
                boundary = len(main)
            main = f"{main[:boundary].rstrip()} {self.mid_hook.strip()} {main[boundary:].lstrip()}".strip()
        elif self.mid_hook.strip():
            main = self.mid_hook.strip()
        if self.cta.strip():
            main = f"{main} {self.cta.strip()}".strip()
        return main

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["script"] = self.script
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptData":
        """Build from a loosely-shaped mapping (LLM output or client payload)."""
        return cls(
            hook=str(data.get("hook") or "").strip(),
            body=str(data.get("body") or data.get("script") or "").strip(),
            mid_hook=str(data.get("mid_hook") or data.get("midHook") or "").strip(),
            cta=str(data.get("cta") or "").strip(),
            captions=[
                Caption.from_dict(item)
                for item in data.get("captions") or []
                if isinstance(item, dict) and str(item.get("text", "")).strip()
            ],
            hashtags=_string_list(data.get("hashtags")),
            keywords=_string_list(data.get("keywords")),
        )


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.replace(",", " ").split()
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


@dataclass
class ImageInfo:
    url: str
    thumbnail: str = ""
    source: str = ""
    author: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ArtifactRef:
    """A final output file the client can download."""

    filename: str
    path: str
    category: str

    @property
    def url(self) -> str:
        if self.category == "videos":
            return f"/api/video/download/{self.filename}"
        return f"/api/video/download/{self.category}/{self.filename}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "filename": self.filename,
            "category": self.category,
        }
