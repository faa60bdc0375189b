"""Endpoints describing the authenticated caller."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from console_api.api.deps import CurrentUserDep, ReadSessionDep, SettingsDep
from console_api.features.menus.schemas import MenuTreeResponse
from console_api.features.menus.service import MenusService
from console_api.features.teams.schemas import MyTeamsResponse
from console_api.features.teams.service import TeamsService
from console_api.features.users.schemas import UserOut
from console_api.features.users.service import serialize_user

router = APIRouter(tags=["me"])

TeamQuery = Annotated[
    UUID | None,
    Query(description="Active team context", alias="teamId"),
]


@router.get(
    "/me",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Current user profile",
)
def read_me(user: CurrentUserDep) -> UserOut:
    return serialize_user(user)


@router.get(
    "/me/teams",
    response_model=MyTeamsResponse,
    summary="Teams the caller belongs to",
)
def read_my_teams(user: CurrentUserDep, session: ReadSessionDep) -> MyTeamsResponse:
    service = TeamsService(session=session)
    return service.list_user_teams(user_id=user.id)


@router.get(
    "/me/menus",
    response_model=MenuTreeResponse,
    response_model_exclude_none=True,
    summary="Navigation visible to the caller",
)
def read_my_menus(
    user: CurrentUserDep,
    session: ReadSessionDep,
    settings: SettingsDep,
    team_id: TeamQuery = None,
) -> MenuTreeResponse:
    service = MenusService(session=session, settings=settings)
    return service.visible_tree(user_id=user.id, team_id=team_id)
