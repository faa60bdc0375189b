from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Response, status

from console_api.api.deps import CurrentUserDep, ReadSessionDep, SettingsDep, WriteSessionDep
from console_api.features.menus.schemas import MenuIdsOut, MenuIdsUpdate
from console_api.features.menus.service import MenusService

from .schemas import TeamRoleCreate, TeamRoleListResponse, TeamRoleOut, TeamRoleUpdate
from .service import TeamRolesService

router = APIRouter(tags=["team-roles"])

TeamPath = Annotated[
    UUID,
    Path(description="Team identifier", alias="teamId"),
]
RolePath = Annotated[
    UUID,
    Path(description="Team role identifier", alias="roleId"),
]


@router.get(
    "/teams/{teamId}/roles",
    response_model=TeamRoleListResponse,
    response_model_exclude_none=True,
    summary="List team roles with member counts",
)
def list_roles(
    _: CurrentUserDep,
    team_id: TeamPath,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> TeamRoleListResponse:
    service = TeamRolesService(session=session, settings=settings)
    return service.list_roles(team_id=team_id)


@router.post(
    "/teams/{teamId}/roles",
    response_model=TeamRoleOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create team role",
)
def create_role(
    user: CurrentUserDep,
    team_id: TeamPath,
    payload: TeamRoleCreate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> TeamRoleOut:
    service = TeamRolesService(session=session, settings=settings)
    return service.create_role(team_id=team_id, payload=payload, operator_id=user.id)


@router.patch(
    "/roles/{roleId}",
    response_model=TeamRoleOut,
    response_model_exclude_none=True,
    summary="Update team role",
)
def update_role(
    user: CurrentUserDep,
    role_id: RolePath,
    payload: TeamRoleUpdate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> TeamRoleOut:
    service = TeamRolesService(session=session, settings=settings)
    return service.update_role(role_id=role_id, payload=payload, operator_id=user.id)


@router.delete(
    "/roles/{roleId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete team role",
)
def delete_role(
    user: CurrentUserDep,
    role_id: RolePath,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> Response:
    service = TeamRolesService(session=session, settings=settings)
    service.delete_role(role_id=role_id, operator_id=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/roles/{roleId}/menus",
    response_model=MenuIdsOut,
    summary="Menus granted to a team role",
)
def get_role_menus(
    user: CurrentUserDep,
    role_id: RolePath,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> MenuIdsOut:
    service = MenusService(session=session, settings=settings)
    return service.get_role_menus(role_id=role_id, viewer_id=user.id)


@router.put(
    "/roles/{roleId}/menus",
    response_model=MenuIdsOut,
    summary="Replace the menus granted to a team role",
)
def replace_role_menus(
    user: CurrentUserDep,
    role_id: RolePath,
    payload: MenuIdsUpdate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> MenuIdsOut:
    service = MenusService(session=session, settings=settings)
    return service.replace_role_menus(
        role_id=role_id,
        menu_ids=payload.menu_ids,
        operator_id=user.id,
    )
