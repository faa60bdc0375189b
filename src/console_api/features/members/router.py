from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Response, status

from console_api.api.deps import CurrentUserDep, ReadSessionDep, WriteSessionDep

from .schemas import MemberAdd, MemberListResponse, MemberOut, MemberRoleUpdate
from .service import MembersService

router = APIRouter(tags=["members"])

TeamPath = Annotated[
    UUID,
    Path(description="Team identifier", alias="teamId"),
]
UserPath = Annotated[
    UUID,
    Path(description="Member user identifier", alias="userId"),
]


@router.get(
    "/teams/{teamId}/members",
    response_model=MemberListResponse,
    response_model_exclude_none=True,
    summary="List team members",
)
def list_members(
    _: CurrentUserDep,
    team_id: TeamPath,
    session: ReadSessionDep,
) -> MemberListResponse:
    service = MembersService(session=session)
    return service.list_members(team_id=team_id)


@router.post(
    "/teams/{teamId}/members",
    response_model=MemberOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add team member",
)
def add_member(
    user: CurrentUserDep,
    team_id: TeamPath,
    payload: MemberAdd,
    session: WriteSessionDep,
) -> MemberOut:
    service = MembersService(session=session)
    return service.add_member(team_id=team_id, payload=payload, operator_id=user.id)


@router.patch(
    "/teams/{teamId}/members/{userId}",
    response_model=MemberOut,
    response_model_exclude_none=True,
    summary="Change a member's team role",
)
def update_member_role(
    user: CurrentUserDep,
    team_id: TeamPath,
    user_id: UserPath,
    payload: MemberRoleUpdate,
    session: WriteSessionDep,
) -> MemberOut:
    service = MembersService(session=session)
    return service.update_member_role(
        team_id=team_id,
        user_id=user_id,
        payload=payload,
        operator_id=user.id,
    )


@router.delete(
    "/teams/{teamId}/members/{userId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove team member",
)
def remove_member(
    user: CurrentUserDep,
    team_id: TeamPath,
    user_id: UserPath,
    session: WriteSessionDep,
) -> Response:
    service = MembersService(session=session)
    service.remove_member(team_id=team_id, user_id=user_id, operator_id=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
