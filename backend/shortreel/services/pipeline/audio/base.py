"""
Voice synthesizer interface and shared error translation.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx

from shortreel.core.exceptions import SynthesisFailed


def reason_for_status(status_code: int, body: str = "") -> str:
    """Map an HTTP status (and vendor body hints) to a SynthesisFailed reason."""
    lowered = body.lower()
    if "quota" in lowered:
        return "quota"
    if status_code in (401, 403):
        return "auth"
    if status_code == 402:
        return "quota"
    if status_code == 429:
        return "rate_limit"
    return "upstream"


def synthesis_error(exc: httpx.HTTPError, vendor: str) -> SynthesisFailed:
    """Translate an httpx failure into SynthesisFailed."""
    if isinstance(exc, httpx.TimeoutException):
        return SynthesisFailed("timeout", f"{vendor} timed out")
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        reason = reason_for_status(status, exc.response.text[:500])
        return SynthesisFailed(reason, f"{vendor} returned HTTP {status} ({reason})")
    return SynthesisFailed("upstream", f"{vendor} request failed: {exc}")


class VoiceSynthesizer(ABC):
    """Text to a spoken audio file."""

    name: str = "voice"
    file_extension: str = "mp3"

    @abstractmethod
    async def synthesize(self, text: str, output_path: Path) -> Path:
        """Write speech for ``text`` to ``output_path``.

        Raises:
            SynthesisFailed: With the failure reason
        """

    @abstractmethod
    async def check(self, timeout: float) -> Optional[str]:
        """Probe credentials without synthesizing. Returns a short detail.

        Raises:
            SynthesisFailed: If the service cannot be used
        """


def write_audio(output_path: Path, data: bytes, vendor: str) -> Path:
    if not data:
        raise SynthesisFailed("empty", f"{vendor} returned no audio")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return output_path
