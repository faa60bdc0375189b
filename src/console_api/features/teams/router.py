from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Response, status

from console_api.api.deps import CurrentUserDep, ReadSessionDep, WriteSessionDep

from .schemas import (
    TeamCreate,
    TeamDetailOut,
    TeamListResponse,
    TeamOut,
    TeamTreeResponse,
    TeamUpdate,
)
from .service import TeamsService

router = APIRouter(tags=["teams"])

TeamPath = Annotated[
    UUID,
    Path(description="Team identifier", alias="teamId"),
]


@router.get(
    "/teams",
    response_model=TeamListResponse,
    response_model_exclude_none=True,
    summary="List teams visible to the caller",
)
def list_teams(user: CurrentUserDep, session: ReadSessionDep) -> TeamListResponse:
    service = TeamsService(session=session)
    return service.list_teams(user=user)


@router.get(
    "/teams/tree",
    response_model=TeamTreeResponse,
    response_model_exclude_none=True,
    summary="Team hierarchy visible to the caller",
)
def get_team_tree(user: CurrentUserDep, session: ReadSessionDep) -> TeamTreeResponse:
    service = TeamsService(session=session)
    return service.team_tree(user=user)


@router.post(
    "/teams",
    response_model=TeamOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create team",
)
def create_team(
    user: CurrentUserDep,
    session: WriteSessionDep,
    payload: TeamCreate,
) -> TeamOut:
    service = TeamsService(session=session)
    return service.create_team(payload, operator_id=user.id)


@router.get(
    "/teams/{teamId}",
    response_model=TeamDetailOut,
    response_model_exclude_none=True,
    summary="Get team",
)
def get_team(
    _: CurrentUserDep,
    team_id: TeamPath,
    session: ReadSessionDep,
) -> TeamDetailOut:
    service = TeamsService(session=session)
    return service.get_team_detail(team_id=team_id)


@router.patch(
    "/teams/{teamId}",
    response_model=TeamOut,
    response_model_exclude_none=True,
    summary="Update team",
)
def update_team(
    user: CurrentUserDep,
    team_id: TeamPath,
    payload: TeamUpdate,
    session: WriteSessionDep,
) -> TeamOut:
    service = TeamsService(session=session)
    return service.update_team(team_id=team_id, payload=payload, operator_id=user.id)


@router.delete(
    "/teams/{teamId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete team",
)
def delete_team(
    user: CurrentUserDep,
    team_id: TeamPath,
    session: WriteSessionDep,
) -> Response:
    service = TeamsService(session=session)
    service.delete_team(team_id=team_id, operator_id=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
