from __future__ import annotations

from fastapi import APIRouter, status

from console_api.api.deps import SettingsDep, WriteSessionDep
from console_api.features.users.schemas import UserOut

from .schemas import LoginRequest, RegisterRequest, TokenResponse
from .service import AuthService

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=UserOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user account",
)
def register(
    payload: RegisterRequest,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> UserOut:
    service = AuthService(session=session, settings=settings)
    return service.register(payload)


@router.post(
    "/login",
    response_model=TokenResponse,
    response_model_exclude_none=True,
    summary="Exchange credentials for an access token",
)
def login(
    payload: LoginRequest,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> TokenResponse:
    service = AuthService(session=session, settings=settings)
    return service.login(payload)
