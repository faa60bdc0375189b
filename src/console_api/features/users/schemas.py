"""Pydantic schemas for user payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from console_api.common.schema import BaseSchema
from console_db.models import SystemRole, UserStatus

DisplayName = Annotated[str, Field(min_length=2, max_length=255)]
Password = Annotated[str, Field(min_length=6, max_length=128)]


class UserOut(BaseSchema):
    """Administrative view of a user account."""

    id: UUID
    email: str
    display_name: str | None = None
    status: UserStatus
    system_roles: list[SystemRole] = Field(default_factory=list)
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseSchema):
    items: list[UserOut]


class UserStatsOut(BaseSchema):
    total: int
    active: int
    inactive: int


class UserCreate(BaseSchema):
    """Payload for provisioning a user account."""

    email: EmailStr
    password: Password
    display_name: DisplayName | None = Field(
        default=None,
        description="Optional display name for the user.",
    )

    @field_validator("display_name", mode="before")
    @classmethod
    def _normalize_display_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value


class UserUpdate(BaseSchema):
    """Fields administrators can update for a user."""

    email: EmailStr | None = None
    password: Password | None = None
    display_name: DisplayName | None = None
    status: UserStatus | None = None

    @model_validator(mode="after")
    def _ensure_changes_present(self) -> UserUpdate:
        if not self.model_fields_set:
            msg = "Provide at least one field to update."
            raise ValueError(msg)
        return self


__all__ = [
    "UserCreate",
    "UserListResponse",
    "UserOut",
    "UserStatsOut",
    "UserUpdate",
]
