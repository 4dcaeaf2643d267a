"""
Runtime environment guards and dependency checks.
"""

import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, List


REQUIRED_RENDER_TOOLS = ("ffmpeg", "ffprobe")


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def missing_runtime_tools(tools: Iterable[str]) -> List[str]:
    return [tool for tool in tools if shutil.which(tool) is None]


def assert_directory_writable(path: Path, *, create: bool = True) -> None:
    if create:
        path.mkdir(parents=True, exist_ok=True)
    if not path.is_dir():
        raise RuntimeError(f"Required directory is missing: {path}")

    probe = path / f".write_probe_{os.getpid()}.tmp"
    try:
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Directory is not writable: {path}") from exc


def run_startup_runtime_checks(
    *,
    directories: Dict[str, Path],
    strict_tools: bool,
    strict_dirs: bool = True,
) -> Dict[str, object]:
    """Verify output directories are writable and the render tools are on PATH."""
    report: Dict[str, object] = {"directories": {}, "tools": {}, "ok": True}

    for name, directory in directories.items():
        try:
            assert_directory_writable(directory)
            report["directories"][name] = {"path": str(directory), "writable": True}
        except RuntimeError as exc:
            report["directories"][name] = {"path": str(directory), "writable": False, "error": str(exc)}
            report["ok"] = False
            if strict_dirs:
                raise

    missing = missing_runtime_tools(REQUIRED_RENDER_TOOLS)
    report["tools"] = {"required": list(REQUIRED_RENDER_TOOLS), "missing": missing}
    if missing:
        report["ok"] = False
        if strict_tools:
            raise RuntimeError("Missing required runtime tools: " + ", ".join(missing))

    return report
