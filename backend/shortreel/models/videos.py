"""
API schemas for video job endpoints

Request fields are deliberately loose; domain validation happens in
shortreel.core.validation so every rejection is a 400 with one message.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class CreateVideoRequest(BaseModel):
    """Request to submit a video job"""
    topic: Optional[str] = None
    duration: Optional[Any] = None
    mode: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class CreateVideoResponse(BaseModel):
    success: bool = True
    job_id: str
    mode: str
    status: str
    message: str


class GenerateScriptRequest(BaseModel):
    """Request to generate a script without rendering"""
    topic: Optional[str] = None
    duration: Optional[Any] = None


class SearchImagesRequest(BaseModel):
    """Request to search stock images for manual selection"""
    topic: str = ""
    keywords: List[str] = []
    max_images: int = 12


class CancelResponse(BaseModel):
    success: bool = True
    job_id: str
    cancelled: bool


class CleanupResponse(BaseModel):
    success: bool = True
    deleted_count: int
    job_id: Optional[str] = None
