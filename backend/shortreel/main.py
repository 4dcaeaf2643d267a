"""
ShortReel Backend API
FastAPI application that turns a topic into a narrated vertical short video

This is the main entry point that wires together all routes and services.
"""

import asyncio
import os
import shutil
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    CORS_ORIGINS,
    OUTPUT_DIR,
    TEMP_DIR,
    ARTIFACT_DIRS,
)
from .routes import videos_router, checks_router
from .core import (
    setup_logging,
    get_logger,
    set_request_id,
    clear_context,
    parse_bool_env,
    run_startup_runtime_checks,
    REQUIRED_RENDER_TOOLS,
)
from .models.status import PIPELINE_STAGES
from .services.capabilities.config import CapabilityConfig
from .services.infrastructure.orchestration import (
    JobRunner,
    get_job_manager,
    set_job_runner,
)
from .services.infrastructure.storage.retention import RetentionSweeper
from .services.pipeline.orchestrator import PipelineOrchestrator

# Initialize logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
use_json_logs = parse_bool_env(os.getenv("JSON_LOGS"), default=False)

setup_logging(
    level=log_level,
    log_file=Path(log_file) if log_file else None,
    use_json=use_json_logs,
)

logger = get_logger(__name__, service="api")
logger.info("Starting ShortReel Backend API", extra={
    "log_level": log_level,
    "json_logs": use_json_logs,
})


async def _run_startup() -> None:
    """Check the runtime, start the job runner and the retention sweeper."""
    strict_runtime = parse_bool_env(
        os.getenv("STARTUP_STRICT_RUNTIME_CHECKS"),
        default=os.getenv("ENV", "").lower() == "production",
    )
    directories = {"output": OUTPUT_DIR, "temp": TEMP_DIR, **ARTIFACT_DIRS}
    runtime_report = run_startup_runtime_checks(
        directories=directories,
        strict_tools=strict_runtime,
        strict_dirs=True,
    )
    app.state.runtime_report = runtime_report
    logger.info("Startup runtime checks complete", extra={"runtime_report": runtime_report})

    job_manager = get_job_manager()
    orchestrator = PipelineOrchestrator(job_manager)
    app.state.runner = set_job_runner(JobRunner(job_manager, orchestrator.run))

    sweeper = RetentionSweeper(job_manager)
    app.state.sweeper = sweeper
    app.state.sweeper_task = None
    try:
        sweeper.run_once()
        app.state.sweeper_task = asyncio.create_task(sweeper.run_periodic())
    except Exception as exc:
        logger.error("Failed to initialize retention sweeper", extra={"error": str(exc)}, exc_info=True)


async def _run_shutdown() -> None:
    """Stop background services gracefully."""
    sweeper_task = getattr(app.state, "sweeper_task", None)
    if sweeper_task:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass

    runner = getattr(app.state, "runner", None)
    if runner is not None:
        await runner.shutdown()
    set_job_runner(None)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await _run_startup()
    try:
        yield
    finally:
        await _run_shutdown()


# Create FastAPI app
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_correlation(request: Request, call_next):
    """Add correlation ID and log each request."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    set_request_id(request_id)
    path = request.url.path

    logger.debug(f"{request.method} {path}", extra={
        "method": request.method,
        "path": path,
        "client": request.client.host if request.client else "unknown",
    })

    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        logger.info(f"Response: {response.status_code}", extra={
            "status_code": response.status_code,
            "method": request.method,
            "path": path,
        })
        return response
    finally:
        clear_context()


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"{field}: {message}" if field else message},
    )


# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(videos_router)
app.include_router(checks_router)


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "ShortReel API - Generate short narrated videos from a topic",
        "version": API_VERSION,
    }


def _job_summary() -> dict:
    jobs = get_job_manager().list_jobs()
    return {
        "total": len(jobs),
        "in_progress": sum(1 for job in jobs if job.status.is_in_progress()),
        "by_stage": {
            stage.value: sum(1 for job in jobs if job.status is stage)
            for stage in PIPELINE_STAGES
        },
    }


@app.get("/api/health")
async def health_check():
    """
    Liveness check.

    Always 200 while the process is up; ``status`` is ``degraded`` when a
    render tool is missing from PATH.
    """
    tools = {}
    for tool in REQUIRED_RENDER_TOOLS:
        path = shutil.which(tool)
        tools[tool] = {"available": path is not None, "path": path}
        if path is None:
            logger.warning(f"Health check: {tool} not found in PATH")

    runner = getattr(app.state, "runner", None)
    return {
        "status": "healthy" if all(t["available"] for t in tools.values()) else "degraded",
        "version": API_VERSION,
        "checks": {
            "tools": tools,
            "active_jobs": runner.active_count if runner is not None else 0,
            "jobs": _job_summary(),
            "credentials": CapabilityConfig.from_env().describe(),
            "runtime_startup": getattr(app.state, "runtime_report", None),
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "shortreel.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=parse_bool_env(os.getenv("RELOAD"), default=False),
    )
