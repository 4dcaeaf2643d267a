"""
Domain error -> HTTP translation shared by the routers.
"""

from fastapi import HTTPException

from ..core.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ShortReelError,
    ValidationError,
)

STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ServiceUnavailableError, 503),
)


def to_http_error(exc: ShortReelError) -> HTTPException:
    for kind, status_code in STATUS_CODES:
        if isinstance(exc, kind):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
