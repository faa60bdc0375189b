"""Domain error taxonomy raised by feature services.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request; :mod:`console_api.core.http.errors` maps them onto Problem Details.
Authorization failures live in :mod:`console_api.core.auth.errors`.
"""

from __future__ import annotations

from console_api.common.problem_details import ProblemDetailsErrorItem


class ConsoleError(ValueError):
    """Base class for domain failures surfaced to API callers."""


class NotFoundError(ConsoleError):
    """A referenced user, team, role, member or menu does not exist."""


class ConflictError(ConsoleError):
    """The write collides with an existing record (duplicate name, code, member)."""


class InvariantViolationError(ConsoleError):
    """The write would break a structural rule of the team or role model.

    Examples: deleting the root team, deleting a team that still has
    children, re-parenting a team under itself or one of its descendants.
    """


class ValidationFailedError(ConsoleError):
    """Input is well-formed but semantically invalid."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[ProblemDetailsErrorItem] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors


__all__ = [
    "ConflictError",
    "ConsoleError",
    "InvariantViolationError",
    "NotFoundError",
    "ValidationFailedError",
]
