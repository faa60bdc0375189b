"""FastAPI dependencies that turn bearer tokens into console users."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from console_api.db import get_db_read
from console_api.settings import Settings, get_settings
from console_db.models import SystemRole, User

from ..auth import AuthenticatedPrincipal, AuthenticationError, PermissionDeniedError
from ..security.tokens import decode_token

ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

_bearer = HTTPBearer(auto_error=False, description="JWT access token from /auth/login")


def get_current_principal(
    settings: SettingsDep,
    db: ReadSessionDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> AuthenticatedPrincipal:
    """Authenticate the bearer token and return the current principal."""

    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    try:
        payload = decode_token(
            credentials.credentials,
            secret=settings.secret_key_value,
            algorithms=[settings.algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Access token has expired") from exc
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid access token") from exc

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise AuthenticationError("Invalid access token") from exc

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Unknown principal")
    if not user.is_active:
        raise AuthenticationError("User account is inactive.")

    return AuthenticatedPrincipal(
        user_id=user.id,
        email=user.email,
        system_roles=frozenset(user.role_values),
    )


def require_authenticated(
    principal: Annotated[AuthenticatedPrincipal, Depends(get_current_principal)],
    db: ReadSessionDep,
) -> User:
    """Ensure the request is authenticated and return the persisted user."""

    user = db.get(User, principal.user_id)
    if user is None:
        raise AuthenticationError("Unknown principal")
    return user


def require_system_admin(
    principal: Annotated[AuthenticatedPrincipal, Depends(get_current_principal)],
    db: ReadSessionDep,
) -> User:
    """Allow only holders of the ADMIN system role."""

    if SystemRole.ADMIN not in principal.system_roles:
        raise PermissionDeniedError(
            "perform system administration",
            reason="System administrator role required",
        )
    return require_authenticated(principal, db)


__all__ = [
    "get_current_principal",
    "require_authenticated",
    "require_system_admin",
]
