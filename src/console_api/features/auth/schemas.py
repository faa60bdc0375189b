"""Request/response contracts for authentication endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import EmailStr, Field, SecretStr

from console_api.common.schema import BaseSchema
from console_api.features.users.schemas import UserCreate, UserOut


class RegisterRequest(UserCreate):
    """Self-service registration; always grants only the USER system role."""


class LoginRequest(BaseSchema):
    email: EmailStr = Field(..., description="Account email.")
    password: SecretStr = Field(..., description="Account password.")


class TokenResponse(BaseSchema):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds.")
    user: UserOut


__all__ = ["LoginRequest", "RegisterRequest", "TokenResponse"]
