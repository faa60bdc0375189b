"""Runtime password complexity validation helpers."""

from __future__ import annotations

from dataclasses import dataclass

from console_api.common.problem_details import ProblemDetailsErrorItem
from console_api.core.errors import ValidationFailedError
from console_api.settings import Settings


@dataclass(frozen=True, slots=True)
class PasswordComplexityPolicy:
    min_length: int
    require_uppercase: bool
    require_lowercase: bool
    require_number: bool
    require_symbol: bool

    @classmethod
    def from_settings(cls, settings: Settings) -> PasswordComplexityPolicy:
        return cls(
            min_length=settings.auth_password_min_length,
            require_uppercase=settings.auth_password_require_uppercase,
            require_lowercase=settings.auth_password_require_lowercase,
            require_number=settings.auth_password_require_number,
            require_symbol=settings.auth_password_require_symbol,
        )


def password_policy_errors(
    password: str,
    *,
    policy: PasswordComplexityPolicy,
    field_path: str,
) -> list[ProblemDetailsErrorItem]:
    """Return one error item per rule ``password`` breaks."""

    errors: list[ProblemDetailsErrorItem] = []
    if len(password) < policy.min_length:
        errors.append(
            ProblemDetailsErrorItem(
                path=field_path,
                code="password_too_short",
                message=f"Password must be at least {policy.min_length} characters.",
            )
        )
    if policy.require_uppercase and not any(character.isupper() for character in password):
        errors.append(
            ProblemDetailsErrorItem(
                path=field_path,
                code="password_missing_uppercase",
                message="Password must include at least one uppercase letter.",
            )
        )
    if policy.require_lowercase and not any(character.islower() for character in password):
        errors.append(
            ProblemDetailsErrorItem(
                path=field_path,
                code="password_missing_lowercase",
                message="Password must include at least one lowercase letter.",
            )
        )
    if policy.require_number and not any(character.isdigit() for character in password):
        errors.append(
            ProblemDetailsErrorItem(
                path=field_path,
                code="password_missing_number",
                message="Password must include at least one number.",
            )
        )
    if policy.require_symbol and password.isalnum():
        errors.append(
            ProblemDetailsErrorItem(
                path=field_path,
                code="password_missing_symbol",
                message="Password must include at least one symbol.",
            )
        )
    return errors


def enforce_password_complexity(
    password: str,
    *,
    policy: PasswordComplexityPolicy,
    field_path: str,
) -> None:
    """Raise a validation error when ``password`` violates runtime complexity policy."""

    errors = password_policy_errors(password, policy=policy, field_path=field_path)
    if errors:
        raise ValidationFailedError(
            "Password does not meet complexity requirements.",
            errors=errors,
        )


__all__ = [
    "PasswordComplexityPolicy",
    "enforce_password_complexity",
    "password_policy_errors",
]
