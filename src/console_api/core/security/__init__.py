"""Security primitives for hashing and token handling."""

from .hashing import hash_password, verify_password
from .password_policy import (
    PasswordComplexityPolicy,
    enforce_password_complexity,
    password_policy_errors,
)
from .tokens import create_access_token, decode_token

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "PasswordComplexityPolicy",
    "enforce_password_complexity",
    "password_policy_errors",
]
