"""Boundary mapping from application errors to JSON error envelopes."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tour_booking.application.dto.user_models import ErrorResponse
from tour_booking.application.ports.user_repository_port import DuplicateEmailError
from tour_booking.application.services.access_guard_service import RoleNotAuthorizedError
from tour_booking.application.services.auth_service import InvalidCredentialsError
from tour_booking.application.services.password_reset_service import (
    InvalidResetTokenError,
    PasswordResetDeliveryError,
)
from tour_booking.application.services.user_management_service import UserNotFoundError
from tour_booking.domain.auth.credentials import InvalidUserInputError
from tour_booking.infrastructure.http.auth_guard import UnauthenticatedError

logger = logging.getLogger(__name__)

UNHANDLED_ERROR_MESSAGE = "Something went very wrong!"

_STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (UnauthenticatedError, 401),
    (InvalidCredentialsError, 401),
    (RoleNotAuthorizedError, 403),
    (UserNotFoundError, 404),
    (InvalidResetTokenError, 400),
    (InvalidUserInputError, 400),
    (DuplicateEmailError, 409),
    (PasswordResetDeliveryError, 500),
)

# OpenAPI documentation for the envelope every mapped error is rendered with.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status_code: {"model": ErrorResponse} for status_code in (400, 401, 403, 404, 409, 500)
}


def error_envelope(*, status_code: int, message: str) -> JSONResponse:
    """Build `{status, message}` with `fail` for 4xx and `error` for 5xx."""

    body = ErrorResponse(
        status="fail" if 400 <= status_code < 500 else "error",
        message=message,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _format_validation_errors(exc: RequestValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg", "invalid value"))
        details.append(f"{location}: {message}" if location else message)
    return "Invalid input data. " + ". ".join(details)


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers that turn errors into JSON envelopes."""

    for error_type, status_code in _STATUS_BY_ERROR:
        app.add_exception_handler(error_type, _mapped_handler(status_code))

    async def handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, RequestValidationError)
        return error_envelope(status_code=400, message=_format_validation_errors(exc))

    async def handle_http_error(request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, StarletteHTTPException)
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Can't find {request.url.path} on this server!"
        else:
            message = str(exc.detail)
        return error_envelope(status_code=exc.status_code, message=message)

    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return error_envelope(status_code=500, message=UNHANDLED_ERROR_MESSAGE)

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _mapped_handler(status_code: int) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("request_failed path=%s error=%s", request.url.path, exc)
        return error_envelope(status_code=status_code, message=str(exc))

    return handler
