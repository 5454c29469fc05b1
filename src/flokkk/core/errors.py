"""Error taxonomy and the JSON error envelope.

Every failure leaves the API as ``{"message": ..., "error": ...}``. Handlers
raise the ``FlokkkError`` subclasses below; the exception handlers installed
by :func:`install_exception_handlers` translate them (and FastAPI's own
errors) into the envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flokkk.core.settings import settings

logger = logging.getLogger(__name__)


class FlokkkError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, error: str | None = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class AuthError(FlokkkError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class PermissionDeniedError(FlokkkError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(FlokkkError):
    """An entity id that does not resolve."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationError(FlokkkError):
    """Malformed input such as an unknown vote value or a missing field."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class RateLimitedError(FlokkkError):
    """The caller exhausted a rate limit or quota."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Rate limit exceeded"

    def __init__(self, message: str | None = None, *, extra: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.extra = extra or {}


def error_body(message: str, error: str | None = None, **extra: Any) -> dict[str, Any]:
    """Build the JSON error envelope."""
    body: dict[str, Any] = {"message": message}
    if error is not None:
        body["error"] = error
    body.update(extra)
    return body


async def _handle_flokkk_error(request: Request, exc: FlokkkError) -> JSONResponse:
    extra = getattr(exc, "extra", {})
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error, **extra),
    )


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request", f"{location}: {detail}" if location else detail),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message),
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the envelope handlers on ``app``."""
    app.add_exception_handler(FlokkkError, _handle_flokkk_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected)
