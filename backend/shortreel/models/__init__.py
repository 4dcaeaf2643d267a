"""
Domain records and API schemas
"""

from .status import JobStatus, JobMode, PIPELINE_STAGES
from .script import Caption, ScriptData, ImageInfo, ArtifactRef, MID_HOOK_POSITION
from .videos import (
    CreateVideoRequest,
    CreateVideoResponse,
    GenerateScriptRequest,
    SearchImagesRequest,
    CancelResponse,
    CleanupResponse,
)

__all__ = [
    "JobStatus",
    "JobMode",
    "PIPELINE_STAGES",
    "Caption",
    "ScriptData",
    "ImageInfo",
    "ArtifactRef",
    "MID_HOOK_POSITION",
    "CreateVideoRequest",
    "CreateVideoResponse",
    "GenerateScriptRequest",
    "SearchImagesRequest",
    "CancelResponse",
    "CleanupResponse",
]
