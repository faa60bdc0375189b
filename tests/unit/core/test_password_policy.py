from __future__ import annotations

import pytest

from console_api.core.errors import ValidationFailedError
from console_api.core.security import (
    PasswordComplexityPolicy,
    enforce_password_complexity,
    password_policy_errors,
)
from tests.utils import build_test_settings


def _policy(**overrides: object) -> PasswordComplexityPolicy:
    values = {
        "min_length": 6,
        "require_uppercase": False,
        "require_lowercase": False,
        "require_number": False,
        "require_symbol": False,
    }
    values.update(overrides)
    return PasswordComplexityPolicy(**values)  # type: ignore[arg-type]


def test_default_policy_only_checks_length() -> None:
    policy = PasswordComplexityPolicy.from_settings(build_test_settings())

    assert policy.min_length == 6
    assert password_policy_errors("abcdef", policy=policy, field_path="password") == []

    errors = password_policy_errors("abc", policy=policy, field_path="password")
    assert [error.code for error in errors] == ["password_too_short"]
    assert errors[0].path == "password"


def test_character_class_rules_report_every_failure() -> None:
    policy = _policy(
        min_length=8,
        require_uppercase=True,
        require_lowercase=True,
        require_number=True,
        require_symbol=True,
    )

    errors = password_policy_errors("abcdefgh", policy=policy, field_path="password")

    assert [error.code for error in errors] == [
        "password_missing_uppercase",
        "password_missing_number",
        "password_missing_symbol",
    ]
    assert password_policy_errors("Abcdefg1!", policy=policy, field_path="password") == []


def test_enforce_raises_validation_error_with_items() -> None:
    policy = _policy(require_number=True)

    with pytest.raises(ValidationFailedError) as excinfo:
        enforce_password_complexity("abcdefg", policy=policy, field_path="newPassword")

    assert excinfo.value.errors is not None
    assert excinfo.value.errors[0].path == "newPassword"
    assert excinfo.value.errors[0].code == "password_missing_number"

    enforce_password_complexity("abcdef1", policy=policy, field_path="newPassword")
