"""Pydantic schemas for team payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import Field, model_validator

from console_api.common.schema import BaseSchema

TeamName = Annotated[str, Field(min_length=2, max_length=255)]


class TeamCreate(BaseSchema):
    """Create a team; ``parentId`` defaults to the root team when omitted."""

    name: TeamName
    description: str | None = None
    parent_id: UUID | None = None


class TeamUpdate(BaseSchema):
    """Partial update; an explicit ``parentId: null`` detaches the team."""

    name: TeamName | None = None
    description: str | None = None
    parent_id: UUID | None = None

    @model_validator(mode="after")
    def _ensure_changes_present(self) -> TeamUpdate:
        if not self.model_fields_set:
            msg = "Provide at least one field to update."
            raise ValueError(msg)
        return self


class TeamSummary(BaseSchema):
    id: UUID
    name: str


class TeamOut(BaseSchema):
    id: UUID
    name: str
    description: str | None = None
    parent_id: UUID | None = None
    is_root: bool = False
    created_at: datetime
    updated_at: datetime


class TeamDetailOut(TeamOut):
    parent: TeamSummary | None = None
    children: list[TeamSummary] = Field(default_factory=list)
    member_count: int = 0
    role_count: int = 0


class TeamListResponse(BaseSchema):
    items: list[TeamOut]


class TeamTreeNode(BaseSchema):
    id: UUID
    name: str
    parent_id: UUID | None = None
    children: list[TeamTreeNode] = Field(default_factory=list)


TeamTreeNode.model_rebuild()


class TeamTreeResponse(BaseSchema):
    items: list[TeamTreeNode]


class MyTeamOut(BaseSchema):
    """One entry of the caller's team switcher."""

    team_id: UUID
    team_name: str
    role_id: UUID
    role_name: str
    role_code: str
    is_admin: bool


class MyTeamsResponse(BaseSchema):
    items: list[MyTeamOut]


__all__ = [
    "MyTeamOut",
    "MyTeamsResponse",
    "TeamCreate",
    "TeamDetailOut",
    "TeamListResponse",
    "TeamOut",
    "TeamSummary",
    "TeamTreeNode",
    "TeamTreeResponse",
    "TeamUpdate",
]
