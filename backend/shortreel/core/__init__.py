"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Domain error taxonomy
    - security.py: Filename sanitization and path containment
    - validation.py: Submission validation
    - runtime.py: Startup checks for directories and render tools

Usage:
    from shortreel.core import get_logger, sanitize_filename, validate_submission
"""

# Logging
from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_job_id,
    clear_context,
    job_context,
    LogTimer,
)

# Exceptions
from .exceptions import (
    ShortReelError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ServiceUnavailableError,
    StageError,
    FatalStageError,
    DegradedStageError,
    GenerationFailed,
    SynthesisFailed,
    ImageSearchFailed,
    ImageDownloadFailed,
    AssemblyFailed,
    JobCancelled,
)

# Security
from .security import (
    sanitize_filename,
    validate_job_id,
    validate_path_within_directory,
    secure_file_path,
)

# Validation
from .validation import (
    Submission,
    validate_submission,
    validate_topic,
    validate_duration,
    validate_mode,
    validate_upload_extension,
)

# Runtime guards
from .runtime import (
    REQUIRED_RENDER_TOOLS,
    parse_bool_env,
    missing_runtime_tools,
    assert_directory_writable,
    run_startup_runtime_checks,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_job_id",
    "clear_context",
    "job_context",
    "LogTimer",
    # Exceptions
    "ShortReelError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    "StageError",
    "FatalStageError",
    "DegradedStageError",
    "GenerationFailed",
    "SynthesisFailed",
    "ImageSearchFailed",
    "ImageDownloadFailed",
    "AssemblyFailed",
    "JobCancelled",
    # Security
    "sanitize_filename",
    "validate_job_id",
    "validate_path_within_directory",
    "secure_file_path",
    # Validation
    "Submission",
    "validate_submission",
    "validate_topic",
    "validate_duration",
    "validate_mode",
    "validate_upload_extension",
    # Runtime guards
    "REQUIRED_RENDER_TOOLS",
    "parse_bool_env",
    "missing_runtime_tools",
    "assert_directory_writable",
    "run_startup_runtime_checks",
]
