# Filename: cloudnest/error_handlers.py
"""
Map domain exceptions onto HTTP responses.

Client errors (4xx) carry the exception message. Server errors (5xx) are
logged in full and answered with a generic message only.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .exceptions import (
    CloudNestError,
    InvariantViolationError,
    NotFoundError,
    PartialDeletionError,
    StoreUnavailableError,
    UploadTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UploadTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (InvariantViolationError, status.HTTP_409_CONFLICT),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PartialDeletionError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]

_GENERIC_MESSAGES = {
    status.HTTP_503_SERVICE_UNAVAILABLE: "Storage is temporarily unavailable. Please try again later.",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "An internal error occurred. Please try again later.",
}


def status_for(exc: CloudNestError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    """Register domain error handlers on the app."""

    @app.exception_handler(CloudNestError)
    async def cloudnest_error_handler(request: Request, exc: CloudNestError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.error(
                "HTTP %d: %s | path=%s",
                code,
                exc,
                request.url.path,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
            message = _GENERIC_MESSAGES.get(code, _GENERIC_MESSAGES[500])
        else:
            logger.warning("HTTP %d: %s | path=%s", code, exc, request.url.path)
            message = str(exc)
        return JSONResponse(status_code=code, content={"message": message})
