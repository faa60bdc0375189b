"""Password login and self-service registration."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.auth.errors import AuthenticationError, PermissionDeniedError
from console_api.core.security import create_access_token, verify_password
from console_api.features.users.schemas import UserOut
from console_api.features.users.service import UsersService, serialize_user
from console_api.settings import Settings

from .schemas import LoginRequest, RegisterRequest, TokenResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, *, session: Session, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._users = UsersService(session=session, settings=settings)

    def register(self, payload: RegisterRequest) -> UserOut:
        if not self._settings.allow_public_registration:
            raise PermissionDeniedError(
                "register",
                reason="Public registration is disabled",
            )
        return self._users.create_user(payload)

    def login(self, payload: LoginRequest) -> TokenResponse:
        user = self._users.find_by_email(payload.email)
        password = payload.password.get_secret_value()
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("auth.login.failed", extra=log_context(reason="invalid_credentials"))
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            logger.info(
                "auth.login.failed",
                extra=log_context(user_id=user.id, reason="inactive"),
            )
            raise AuthenticationError("User account is inactive.")

        now = datetime.now(UTC)
        lifetime = timedelta(minutes=self._settings.access_token_expire_minutes)
        token = create_access_token(
            subject=user.id,
            secret=self._settings.secret_key_value,
            algorithm=self._settings.algorithm,
            expires_in=lifetime,
            now=now,
        )
        user.last_login_at = now
        self._session.flush([user])

        logger.info("auth.login.success", extra=log_context(user_id=user.id))
        return TokenResponse(
            access_token=token,
            expires_in=int(lifetime.total_seconds()),
            user=serialize_user(user),
        )


__all__ = ["AuthService"]
