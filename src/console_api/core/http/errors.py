"""Exception handlers that translate auth and domain errors to HTTP responses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request, status
from starlette.responses import Response

from console_api.common.exceptions import api_error_handler
from console_api.common.problem_details import INVARIANT_VIOLATION, ApiError

from ..auth.errors import AuthenticationError, PermissionDeniedError
from ..errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    ValidationFailedError,
)

type HttpExceptionHandler = Callable[[Request, Exception], Response | Awaitable[Response]]


def _handle_authentication_error(request: Request, exc: AuthenticationError) -> Response:
    """Translate auth failures into HTTP 401 responses."""

    error = ApiError(
        error_type="unauthorized",
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(exc) or "Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    return api_error_handler(request, error)


def _handle_permission_error(request: Request, exc: PermissionDeniedError) -> Response:
    """Translate permission denials into HTTP 403 responses."""

    error = ApiError(
        error_type="forbidden",
        status_code=status.HTTP_403_FORBIDDEN,
        detail=str(exc) or "Forbidden",
    )
    return api_error_handler(request, error)


def _handle_not_found(request: Request, exc: NotFoundError) -> Response:
    error = ApiError(
        error_type="not_found",
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(exc) or "Not found",
    )
    return api_error_handler(request, error)


def _handle_conflict(request: Request, exc: ConflictError) -> Response:
    error = ApiError(
        error_type="conflict",
        status_code=status.HTTP_409_CONFLICT,
        detail=str(exc) or "Conflict",
    )
    return api_error_handler(request, error)


def _handle_invariant_violation(request: Request, exc: InvariantViolationError) -> Response:
    error = ApiError(
        error_type=INVARIANT_VIOLATION.type,
        title=INVARIANT_VIOLATION.title,
        status_code=INVARIANT_VIOLATION.status,
        detail=str(exc) or INVARIANT_VIOLATION.title,
    )
    return api_error_handler(request, error)


def _handle_validation_failed(request: Request, exc: ValidationFailedError) -> Response:
    error = ApiError(
        error_type="validation_error",
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        detail=str(exc) or "Invalid request",
        errors=exc.errors,
    )
    return api_error_handler(request, error)


def register_auth_exception_handlers(app: FastAPI) -> None:
    """Attach auth handlers to the FastAPI app."""

    app.add_exception_handler(
        AuthenticationError,
        cast(HttpExceptionHandler, _handle_authentication_error),
    )
    app.add_exception_handler(
        PermissionDeniedError,
        cast(HttpExceptionHandler, _handle_permission_error),
    )


def register_domain_exception_handlers(app: FastAPI) -> None:
    """Attach handlers for the service-level error taxonomy."""

    app.add_exception_handler(NotFoundError, cast(HttpExceptionHandler, _handle_not_found))
    app.add_exception_handler(ConflictError, cast(HttpExceptionHandler, _handle_conflict))
    app.add_exception_handler(
        InvariantViolationError,
        cast(HttpExceptionHandler, _handle_invariant_violation),
    )
    app.add_exception_handler(
        ValidationFailedError,
        cast(HttpExceptionHandler, _handle_validation_failed),
    )


__all__ = ["register_auth_exception_handlers", "register_domain_exception_handlers"]
