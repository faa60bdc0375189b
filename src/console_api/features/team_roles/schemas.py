"""Pydantic schemas for team role payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import Field, model_validator

from console_api.common.schema import BaseSchema

RoleName = Annotated[str, Field(min_length=2, max_length=120)]
RoleCode = Annotated[str, Field(min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9_-]*$")]


class TeamRoleCreate(BaseSchema):
    name: RoleName
    code: RoleCode | None = Field(
        default=None,
        description="Stable identifier; derived from the name when omitted.",
    )
    is_admin: bool = False
    seed_from_fallback: bool = Field(
        default=False,
        description="Copy the default USER menu set into the new role.",
    )


class TeamRoleUpdate(BaseSchema):
    name: RoleName | None = None
    code: RoleCode | None = None
    is_admin: bool | None = None

    @model_validator(mode="after")
    def _ensure_changes_present(self) -> TeamRoleUpdate:
        if not self.model_fields_set:
            msg = "Provide at least one field to update."
            raise ValueError(msg)
        return self


class TeamRoleOut(BaseSchema):
    id: UUID
    team_id: UUID
    name: str
    code: str
    is_admin: bool
    member_count: int = 0
    created_at: datetime
    updated_at: datetime


class TeamRoleListResponse(BaseSchema):
    items: list[TeamRoleOut]


__all__ = ["TeamRoleCreate", "TeamRoleListResponse", "TeamRoleOut", "TeamRoleUpdate"]
