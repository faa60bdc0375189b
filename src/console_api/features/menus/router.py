from __future__ import annotations

from fastapi import APIRouter

from console_api.api.deps import (
    CurrentUserDep,
    ReadSessionDep,
    SettingsDep,
    SystemAdminDep,
    WriteSessionDep,
)

from .schemas import MenuIdsOut, MenuIdsUpdate, MenuTreeResponse
from .service import MenusService

router = APIRouter(tags=["menus"])


@router.get(
    "/menus",
    response_model=MenuTreeResponse,
    response_model_exclude_none=True,
    summary="Full menu tree",
)
def list_menus(
    _: CurrentUserDep,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> MenuTreeResponse:
    service = MenusService(session=session, settings=settings)
    return service.list_tree()


@router.get(
    "/menus/fallback",
    response_model=MenuIdsOut,
    summary="Default menus for users without team-specific grants",
)
def get_fallback_menus(
    _: SystemAdminDep,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> MenuIdsOut:
    service = MenusService(session=session, settings=settings)
    return service.get_fallback()


@router.put(
    "/menus/fallback",
    response_model=MenuIdsOut,
    summary="Replace the default menu set",
)
def replace_fallback_menus(
    admin: SystemAdminDep,
    payload: MenuIdsUpdate,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> MenuIdsOut:
    service = MenusService(session=session, settings=settings)
    return service.replace_fallback(payload.menu_ids, operator_id=admin.id)
