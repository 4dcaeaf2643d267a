"""
Use cases - business operations behind the HTTP routes.
"""

from .base import UseCase
from .content_use_case import GenerateScriptUseCase, SearchImagesUseCase
from .editing_use_case import Regeneration, RegenerateVideoUseCase, ReplaceVoiceUseCase, VoiceReplacement
from .video_job_use_case import (
    CancelJobUseCase,
    CleanupJobUseCase,
    CleanupTempFilesUseCase,
    CreateVideoJobUseCase,
    JobStatusUseCase,
)

__all__ = [
    "UseCase",
    "CreateVideoJobUseCase",
    "JobStatusUseCase",
    "CancelJobUseCase",
    "CleanupTempFilesUseCase",
    "CleanupJobUseCase",
    "GenerateScriptUseCase",
    "SearchImagesUseCase",
    "ReplaceVoiceUseCase",
    "RegenerateVideoUseCase",
    "VoiceReplacement",
    "Regeneration",
]
