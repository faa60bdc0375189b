from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from console_api.api.deps import ReadSessionDep, SettingsDep, SystemAdminDep, WriteSessionDep
from console_api.features.menus.schemas import MenuTreeResponse
from console_api.features.menus.service import MenusService
from console_db.models import SystemRole

from .schemas import UserCreate, UserListResponse, UserOut, UserStatsOut, UserUpdate
from .service import UsersService

router = APIRouter(tags=["users"])

UserPath = Annotated[
    UUID,
    Path(description="User identifier", alias="userId"),
]
RolePath = Annotated[
    SystemRole,
    Path(description="System role", alias="role"),
]
TeamQuery = Annotated[
    UUID | None,
    Query(description="Team context for menu resolution", alias="teamId"),
]


@router.get(
    "/users",
    response_model=UserListResponse,
    response_model_exclude_none=True,
    summary="List users",
)
def list_users(
    _: SystemAdminDep,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> UserListResponse:
    service = UsersService(session=session, settings=settings)
    return service.list_users()


@router.get(
    "/users/stats",
    response_model=UserStatsOut,
    summary="User account counts",
)
def get_user_stats(
    _: SystemAdminDep,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> UserStatsOut:
    service = UsersService(session=session, settings=settings)
    return service.stats()


@router.post(
    "/users",
    response_model=UserOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
def create_user(
    admin: SystemAdminDep,
    payload: UserCreate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = UsersService(session=session, settings=settings)
    return service.create_user(payload, operator_id=admin.id)


@router.get(
    "/users/{userId}",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Get user",
)
def get_user(
    _: SystemAdminDep,
    user_id: UserPath,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = UsersService(session=session, settings=settings)
    return service.get_user_out(user_id=user_id)


@router.patch(
    "/users/{userId}",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Update user",
)
def update_user(
    admin: SystemAdminDep,
    user_id: UserPath,
    payload: UserUpdate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = UsersService(session=session, settings=settings)
    return service.update_user(user_id=user_id, payload=payload, operator_id=admin.id)


@router.delete(
    "/users/{userId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
)
def delete_user(
    admin: SystemAdminDep,
    user_id: UserPath,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> Response:
    service = UsersService(session=session, settings=settings)
    service.delete_user(user_id=user_id, operator_id=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/users/{userId}/system-roles/{role}",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Grant a system role",
)
def grant_system_role(
    admin: SystemAdminDep,
    user_id: UserPath,
    role: RolePath,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = UsersService(session=session, settings=settings)
    return service.grant_system_role(user_id=user_id, role=role, operator_id=admin.id)


@router.delete(
    "/users/{userId}/system-roles/{role}",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Revoke a system role",
)
def revoke_system_role(
    admin: SystemAdminDep,
    user_id: UserPath,
    role: RolePath,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = UsersService(session=session, settings=settings)
    return service.revoke_system_role(user_id=user_id, role=role, operator_id=admin.id)


@router.get(
    "/users/{userId}/menus",
    response_model=MenuTreeResponse,
    response_model_exclude_none=True,
    summary="Menus visible to a user",
)
def get_user_menus(
    _: SystemAdminDep,
    user_id: UserPath,
    session: ReadSessionDep,
    settings: SettingsDep,
    team_id: TeamQuery = None,
) -> MenuTreeResponse:
    UsersService(session=session, settings=settings).get_user(user_id=user_id)
    service = MenusService(session=session, settings=settings)
    return service.visible_tree(user_id=user_id, team_id=team_id)
