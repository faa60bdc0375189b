"""API router composition for the console FastAPI application."""

from __future__ import annotations

from fastapi import APIRouter

from console_api.features.auth.router import router as auth_router
from console_api.features.me.router import router as me_router
from console_api.features.members.router import router as members_router
from console_api.features.menus.router import router as menus_router
from console_api.features.team_roles.router import router as team_roles_router
from console_api.features.teams.router import router as teams_router
from console_api.features.users.router import router as users_router


def create_api_router() -> APIRouter:
    api_router = APIRouter(prefix="/v1")
    api_router.include_router(auth_router, prefix="/auth")
    api_router.include_router(me_router)
    api_router.include_router(users_router)
    api_router.include_router(teams_router)
    api_router.include_router(members_router)
    api_router.include_router(team_roles_router)
    api_router.include_router(menus_router)
    return api_router


__all__ = ["create_api_router"]
