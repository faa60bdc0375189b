"""Problem Details helpers for consistent API error responses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from fastapi import status

from .schema import BaseSchema


@dataclass(frozen=True)
class ErrorDefinition:
    """Canonical Problem Details error metadata."""

    type: str
    title: str
    status: int


ERROR_DEFINITIONS: dict[str, ErrorDefinition] = {
    definition.type: definition
    for definition in (
        ErrorDefinition("bad_request", "Bad request", status.HTTP_400_BAD_REQUEST),
        ErrorDefinition("unauthorized", "Unauthorized", status.HTTP_401_UNAUTHORIZED),
        ErrorDefinition("forbidden", "Forbidden", status.HTTP_403_FORBIDDEN),
        ErrorDefinition("not_found", "Not found", status.HTTP_404_NOT_FOUND),
        ErrorDefinition(
            "method_not_allowed", "Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED
        ),
        ErrorDefinition("conflict", "Conflict", status.HTTP_409_CONFLICT),
        ErrorDefinition(
            "validation_error", "Validation error", status.HTTP_422_UNPROCESSABLE_CONTENT
        ),
        ErrorDefinition(
            "internal_error", "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
    )
}

# Shares 409 with "conflict"; kept out of the status lookup below.
INVARIANT_VIOLATION = ErrorDefinition(
    "invariant_violation", "Invariant violation", status.HTTP_409_CONFLICT
)

STATUS_TO_ERROR_TYPE: dict[int, ErrorDefinition] = {
    definition.status: definition for definition in ERROR_DEFINITIONS.values()
}


class ProblemDetailsErrorItem(BaseSchema):
    """Structured error detail used for validation-style responses."""

    path: str | None = None
    message: str
    code: str | None = None


class ProblemDetails(BaseSchema):
    """Problem Details-style response payload."""

    type: str
    title: str
    status: int
    detail: str | dict[str, Any] | None = None
    instance: str
    request_id: str | None = None
    errors: list[ProblemDetailsErrorItem] | None = None


class ApiError(RuntimeError):
    """Custom exception carrying Problem Details metadata."""

    def __init__(
        self,
        *,
        error_type: str,
        status_code: int,
        detail: str | dict[str, Any] | None = None,
        title: str | None = None,
        errors: list[ProblemDetailsErrorItem] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        message = detail if isinstance(detail, str) and detail else title or error_type
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code
        self.detail = detail
        self.title = title
        self.errors = errors
        self.headers = headers


def resolve_error_definition(status_code: int) -> ErrorDefinition:
    """Return the canonical error definition for ``status_code``."""

    return STATUS_TO_ERROR_TYPE.get(
        status_code,
        ErrorDefinition(type="error", title="Error", status=status_code),
    )


def format_error_path(loc: Iterable[Any] | None) -> str | None:
    """Convert a Pydantic-style loc tuple/list into a dotted path."""

    if not loc:
        return None
    parts: list[str] = []
    for entry in loc:
        if entry in {"body", "query", "path", "header", "cookie"}:
            continue
        if isinstance(entry, int):
            if not parts:
                parts.append(f"[{entry}]")
            else:
                parts[-1] = f"{parts[-1]}[{entry}]"
            continue
        parts.append(str(entry))
    if not parts:
        return None
    return ".".join(parts)


def error_items_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[ProblemDetailsErrorItem]:
    """Convert Pydantic error dicts into Problem Details error items."""

    items: list[ProblemDetailsErrorItem] = []
    for entry in errors:
        loc = entry.get("loc") or entry.get("path")
        message = entry.get("msg") or entry.get("message") or "Invalid value"
        code = entry.get("type") or entry.get("code")
        path_value: str | None
        if isinstance(loc, (list, tuple)):
            path_value = format_error_path(loc)
        elif isinstance(loc, str):
            path_value = loc
        else:
            path_value = None
        items.append(
            ProblemDetailsErrorItem(
                path=path_value,
                message=str(message),
                code=str(code) if code else None,
            )
        )
    return items


def coerce_detail_and_errors(
    detail: Any,
) -> tuple[str | dict[str, Any] | None, list[ProblemDetailsErrorItem] | None]:
    """Normalize mixed ``detail`` payloads into API detail payload + error items."""

    if detail is None:
        return None, None
    if isinstance(detail, ProblemDetails):
        return detail.detail, detail.errors
    if isinstance(detail, list):
        return None, error_items_from_pydantic(detail)
    if isinstance(detail, dict):
        payload = dict(detail)
        errors: list[ProblemDetailsErrorItem] | None = None
        if isinstance(payload.get("errors"), list):
            errors = error_items_from_pydantic(payload["errors"])
        message = payload.get("detail") or payload.get("message")
        if isinstance(message, str):
            return message, errors
        return payload, errors
    if isinstance(detail, str):
        return detail, None
    return str(detail), None


def build_problem_details(
    *,
    status_code: int,
    instance: str,
    request_id: str | None,
    detail: str | dict[str, Any] | None = None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    title: str | None = None,
) -> ProblemDetails:
    """Construct a Problem Details payload."""

    definition = resolve_error_definition(status_code)
    return ProblemDetails(
        type=error_type or definition.type,
        title=title or definition.title,
        status=status_code,
        detail=detail,
        instance=instance,
        request_id=request_id,
        errors=errors,
    )


__all__ = [
    "ERROR_DEFINITIONS",
    "INVARIANT_VIOLATION",
    "ApiError",
    "ErrorDefinition",
    "ProblemDetails",
    "ProblemDetailsErrorItem",
    "build_problem_details",
    "coerce_detail_and_errors",
    "error_items_from_pydantic",
    "format_error_path",
    "resolve_error_definition",
]
