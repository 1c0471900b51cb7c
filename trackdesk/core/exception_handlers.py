"""Exception handlers: domain and framework errors to JSON responses.

Every error body has the shape {"error", "message", "details"}. Register once
with register_exception_handlers(app).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from trackdesk.core.config import get_settings
from trackdesk.domain.exceptions import (
    NotAuthenticatedException,
    PartitionUnavailableException,
    ResourceNotFoundException,
    StoreWriteException,
    TrackdeskException,
    ValidationException,
)
from trackdesk.shared.utils.sanitization import KeyCollisionError

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins. Unlisted domain errors are 400.
_STATUS_BY_TYPE: tuple[tuple[type[TrackdeskException], int], ...] = (
    (NotAuthenticatedException, 401),
    (PartitionUnavailableException, 403),
    (ResourceNotFoundException, 404),
    (ValidationException, 400),
    (StoreWriteException, 502),
)


def _error_response(
    status_code: int,
    error: str,
    message: Any,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details or {}},
        headers=headers,
    )


def status_for(exc: TrackdeskException) -> int:
    """Return the HTTP status a domain exception maps to."""
    for exc_type, status_code in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status_code
    return 400


def _trackdesk_exception_handler(request: Request, exc: TrackdeskException) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.message, exc.details)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return _error_response(status_code, exc.error_code, exc.message, exc.details, headers)


def _key_collision_handler(request: Request, exc: KeyCollisionError) -> JSONResponse:
    """Strict sanitization found two payload keys that map to the same store key."""
    return _error_response(
        400, "KEY_COLLISION", str(exc), {"key": exc.key, "originals": exc.originals}
    )


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        422, "VALIDATION_ERROR", "Request validation failed", {"errors": exc.errors()}
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        exc.status_code, "HTTP_ERROR", exc.detail, headers=getattr(exc, "headers", None)
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is only exposed in debug mode."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TrackdeskException, _trackdesk_exception_handler)
    app.add_exception_handler(KeyCollisionError, _key_collision_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
