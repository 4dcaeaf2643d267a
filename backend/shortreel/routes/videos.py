"""
Video job routes - submit, poll, cancel, download, clean up and edit.
"""

import secrets
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from ..config import (
    ARTIFACT_DIRS,
    AUDIO_UPLOAD_EXTENSIONS,
    IMAGE_UPLOAD_EXTENSIONS,
    MAX_REGENERATE_IMAGES,
    MAX_UPLOAD_SIZE,
    TEMP_DIR,
)
from ..core import (
    ShortReelError,
    ValidationError,
    get_logger,
    sanitize_filename,
    secure_file_path,
    validate_job_id,
    validate_upload_extension,
)
from ..models import (
    CancelResponse,
    CleanupResponse,
    CreateVideoRequest,
    CreateVideoResponse,
    GenerateScriptRequest,
    SearchImagesRequest,
)
from ..services.infrastructure.orchestration import get_job_manager, get_job_runner
from ..services.infrastructure.storage.retention import RetentionSweeper
from ..services.use_cases import (
    CancelJobUseCase,
    CleanupJobUseCase,
    CleanupTempFilesUseCase,
    CreateVideoJobUseCase,
    GenerateScriptUseCase,
    JobStatusUseCase,
    Regeneration,
    RegenerateVideoUseCase,
    ReplaceVoiceUseCase,
    SearchImagesUseCase,
    VoiceReplacement,
)
from .errors import to_http_error

logger = get_logger(__name__, component="video_routes")

router = APIRouter(prefix="/api/video", tags=["videos"])

MEDIA_TYPES = {".mp4": "video/mp4", ".txt": "text/plain; charset=utf-8"}
UPLOAD_CHUNK_SIZE = 1024 * 1024


def _sweeper(request: Request) -> RetentionSweeper:
    sweeper = getattr(request.app.state, "sweeper", None)
    return sweeper or RetentionSweeper(get_job_manager())


def _artifact_response(category: str, filename: str) -> FileResponse:
    directory = ARTIFACT_DIRS.get(category)
    if directory is None:
        raise HTTPException(status_code=404, detail="Unknown artifact category")
    path = secure_file_path(directory, filename)
    if path is None or not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type=MEDIA_TYPES.get(path.suffix.lower()), filename=path.name)


@router.post("/create", response_model=CreateVideoResponse)
async def create_video(request: CreateVideoRequest):
    """Submit a job; returns immediately with the job in ``pending``."""
    use_case = CreateVideoJobUseCase(get_job_manager(), get_job_runner())
    try:
        return await use_case.execute(request)
    except ShortReelError as exc:
        raise to_http_error(exc)


@router.get("/status/{job_id}")
async def get_video_status(job_id: str):
    try:
        return await JobStatusUseCase(get_job_manager()).execute(job_id)
    except ShortReelError as exc:
        raise to_http_error(exc)


@router.post("/cancel/{job_id}", response_model=CancelResponse)
async def cancel_video(job_id: str):
    use_case = CancelJobUseCase(get_job_manager(), get_job_runner())
    try:
        return await use_case.execute(job_id)
    except ShortReelError as exc:
        raise to_http_error(exc)


@router.get("/download/{filename}")
async def download_video(filename: str):
    return _artifact_response("videos", filename)


@router.get("/download/{category}/{filename}")
async def download_artifact(category: str, filename: str):
    """Download a draft, no-voice or transcript artifact."""
    if category == "videos":
        raise HTTPException(status_code=404, detail="Unknown artifact category")
    return _artifact_response(category, filename)


@router.post("/cleanup/all", response_model=CleanupResponse)
async def cleanup_all(request: Request):
    """Delete temp files older than the temp retention window."""
    return await CleanupTempFilesUseCase(_sweeper(request)).execute(None)


@router.post("/cleanup/{job_id}", response_model=CleanupResponse)
async def cleanup_job(job_id: str, request: Request):
    """Force-delete one job's temp and output files."""
    if not validate_job_id(job_id):
        raise HTTPException(status_code=400, detail="Invalid job id")
    return await CleanupJobUseCase(_sweeper(request)).execute(job_id)


@router.post("/generate-script")
async def generate_script(request: GenerateScriptRequest):
    try:
        return await GenerateScriptUseCase().execute(request)
    except ShortReelError as exc:
        raise to_http_error(exc)


@router.post("/search-images")
async def search_images(request: SearchImagesRequest):
    try:
        return await SearchImagesUseCase().execute(request)
    except ShortReelError as exc:
        raise to_http_error(exc)


async def _save_upload(upload: UploadFile, allowed) -> Path:
    """Stream an upload into the temp directory, enforcing type and size."""
    suffix = validate_upload_extension(upload.filename, allowed)
    TEMP_DIR.mkdir(parents=True, exist_ok=True)
    path = TEMP_DIR / f"upload_{secrets.token_hex(8)}{suffix}"

    size = 0
    try:
        with open(path, "wb") as handle:
            while True:
                chunk = await upload.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > MAX_UPLOAD_SIZE:
                    logger.warning("Upload too large", extra={"filename": sanitize_filename(upload.filename)})
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large. Maximum size: {MAX_UPLOAD_SIZE / (1024 * 1024):.0f}MB",
                    )
                handle.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    if size == 0:
        path.unlink(missing_ok=True)
        raise ValidationError(f"Uploaded file '{sanitize_filename(upload.filename)}' is empty")
    return path


@router.post("/replace-voice")
async def replace_voice(
    filename: str = Form(...),
    category: str = Form("videos"),
    audio: UploadFile = File(...),
):
    """Re-mux a rendered video with an uploaded voice track."""
    saved: List[Path] = []
    try:
        saved.append(await _save_upload(audio, AUDIO_UPLOAD_EXTENSIONS))
        return await ReplaceVoiceUseCase().execute(
            VoiceReplacement(filename=filename, audio=saved[0], category=category)
        )
    except ShortReelError as exc:
        raise to_http_error(exc)
    finally:
        for path in saved:
            path.unlink(missing_ok=True)


@router.post("/regenerate/{job_id}")
async def regenerate_video(
    job_id: str,
    images: Optional[List[UploadFile]] = File(None),
    audio: Optional[UploadFile] = File(None),
    captions: Optional[str] = Form(None),
):
    """Re-render a completed job with new images, a new voice, or both."""
    images = images or []
    saved: List[Path] = []
    try:
        if len(images) > MAX_REGENERATE_IMAGES:
            raise ValidationError(f"At most {MAX_REGENERATE_IMAGES} images can be uploaded")
        for image in images:
            saved.append(await _save_upload(image, IMAGE_UPLOAD_EXTENSIONS))
        image_paths = list(saved)
        audio_path = None
        if audio is not None:
            audio_path = await _save_upload(audio, AUDIO_UPLOAD_EXTENSIONS)
            saved.append(audio_path)

        use_case = RegenerateVideoUseCase(get_job_manager())
        return await use_case.execute(
            Regeneration(job_id=job_id, images=image_paths, audio=audio_path, captions=captions)
        )
    except ShortReelError as exc:
        raise to_http_error(exc)
    finally:
        for path in saved:
            path.unlink(missing_ok=True)
