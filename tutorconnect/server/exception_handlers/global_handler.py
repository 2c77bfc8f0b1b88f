"""
Global Exception Handlers for FastAPI Application.

Errors that escape an endpoint are logged with an error ID and request context
and returned as ``{"detail": ..., "error_id": ..., "error_type": ...}``. The
error ID lets clients reference a failure when reporting it.

- Database constraint violations become 400.
- Token errors raised outside the auth dependency become 401.
- Anything else becomes 500 without leaking internals.
"""

import uuid
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from jose import JWTError
from sqlalchemy.exc import IntegrityError

from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.monitoring import log_error

logger = get_logger(__name__)


def _request_context(request: Request, exc: Exception, error_id: str) -> Dict[str, Any]:
    return {
        "error_id": error_id,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
    }


def _error_response(status_code: int, detail: str, exc: Exception, error_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_id": error_id, "error_type": type(exc).__name__},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A write broke a unique, foreign key or check constraint."""
    error_id = uuid.uuid4().hex
    context = _request_context(request, exc, error_id)
    logger.warning(f"Constraint violation [{error_id}] in {request.method} {request.url.path}: {exc.orig}", extra=context)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Database constraint violation", exc, error_id)


async def jwt_error_handler(request: Request, exc: JWTError) -> JSONResponse:
    error_id = uuid.uuid4().hex
    logger.info(f"Token error [{error_id}] in {request.method} {request.url.path}: {exc}")
    return _error_response(status.HTTP_401_UNAUTHORIZED, "Invalid token", exc, error_id)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception with its full context.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with a 500 status and the error ID
    """
    error_id = uuid.uuid4().hex
    context = _request_context(request, exc, error_id)
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra=context,
    )
    log_error(type(exc).__name__, str(exc), context)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc, error_id)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(JWTError, jwt_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
