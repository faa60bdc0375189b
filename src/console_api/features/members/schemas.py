"""Pydantic schemas for team membership payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from console_api.common.schema import BaseSchema


class MemberAdd(BaseSchema):
    user_id: UUID
    team_role_id: UUID


class MemberRoleUpdate(BaseSchema):
    team_role_id: UUID


class MemberOut(BaseSchema):
    id: UUID
    team_id: UUID
    user_id: UUID
    email: str
    display_name: str | None = None
    team_role_id: UUID
    role_name: str
    role_code: str
    is_admin: bool
    created_at: datetime


class MemberListResponse(BaseSchema):
    items: list[MemberOut]


__all__ = ["MemberAdd", "MemberListResponse", "MemberOut", "MemberRoleUpdate"]
