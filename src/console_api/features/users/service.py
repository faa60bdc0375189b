"""User administration: provisioning, updates and system-role grants."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.errors import ConflictError, InvariantViolationError, NotFoundError
from console_api.core.security import (
    PasswordComplexityPolicy,
    enforce_password_complexity,
    hash_password,
)
from console_api.settings import Settings
from console_db.models import SystemRole, User, UserStatus, UserSystemRole

from .schemas import UserCreate, UserListResponse, UserOut, UserStatsOut, UserUpdate

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        status=user.status,
        system_roles=sorted(user.role_values, key=lambda role: role.value),
        last_login_at=user.last_login_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class UsersService:
    def __init__(self, *, session: Session, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._password_policy = PasswordComplexityPolicy.from_settings(settings)

    # -- Queries -----------------------------------------------------------

    def get_user(self, *, user_id: UUID) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_user_out(self, *, user_id: UUID) -> UserOut:
        return serialize_user(self.get_user(user_id=user_id))

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email_normalized == email.strip().lower())
        return self._session.execute(stmt).scalar_one_or_none()

    def list_users(self) -> UserListResponse:
        stmt = select(User).order_by(User.created_at.desc(), User.email_normalized.asc())
        users = self._session.execute(stmt).scalars().all()
        return UserListResponse(items=[serialize_user(user) for user in users])

    def stats(self) -> UserStatsOut:
        total = self._session.execute(select(func.count(User.id))).scalar_one()
        active = self._session.execute(
            select(func.count(User.id)).where(User.status == UserStatus.ACTIVE)
        ).scalar_one()
        return UserStatsOut(total=total, active=active, inactive=total - active)

    # -- Mutations ---------------------------------------------------------

    def create_user(self, payload: UserCreate, *, operator_id: UUID | None = None) -> UserOut:
        enforce_password_complexity(
            payload.password,
            policy=self._password_policy,
            field_path="password",
        )
        if self.find_by_email(payload.email) is not None:
            raise ConflictError("Email already registered")

        user = User(
            email=payload.email,
            display_name=payload.display_name,
            hashed_password=hash_password(payload.password),
            status=UserStatus.ACTIVE,
        )
        user.system_roles.append(UserSystemRole(role=SystemRole.USER))
        self._session.add(user)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc

        logger.info(
            "users.create.success",
            extra=log_context(user_id=user.id, operator_id=operator_id),
        )
        return serialize_user(user)

    def update_user(
        self,
        *,
        user_id: UUID,
        payload: UserUpdate,
        operator_id: UUID | None = None,
    ) -> UserOut:
        user = self.get_user(user_id=user_id)
        updates = payload.model_dump(exclude_unset=True)

        if updates.get("email") is not None:
            existing = self.find_by_email(updates["email"])
            if existing is not None and existing.id != user.id:
                raise ConflictError("Email already registered")
            user.email = updates["email"]
        if "display_name" in updates:
            user.display_name = updates["display_name"]
        if updates.get("password") is not None:
            enforce_password_complexity(
                updates["password"],
                policy=self._password_policy,
                field_path="password",
            )
            user.hashed_password = hash_password(updates["password"])
        if updates.get("status") is not None:
            status = UserStatus(updates["status"])
            if status is not UserStatus.ACTIVE and SystemRole.ADMIN in user.role_values:
                self._ensure_not_last_admin(user)
            user.status = status

        try:
            self._session.flush([user])
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc

        logger.info(
            "users.update.success",
            extra=log_context(
                user_id=user.id,
                operator_id=operator_id,
                fields=sorted(updates),
            ),
        )
        return serialize_user(user)

    def delete_user(self, *, user_id: UUID, operator_id: UUID | None = None) -> None:
        user = self.get_user(user_id=user_id)
        if SystemRole.ADMIN in user.role_values:
            self._ensure_not_last_admin(user)

        self._session.delete(user)
        self._session.flush()
        logger.info(
            "users.delete.success",
            extra=log_context(user_id=user_id, operator_id=operator_id),
        )

    def grant_system_role(
        self,
        *,
        user_id: UUID,
        role: SystemRole,
        operator_id: UUID | None = None,
    ) -> UserOut:
        user = self.get_user(user_id=user_id)
        if role not in user.role_values:
            user.system_roles.append(UserSystemRole(role=role))
            self._session.flush()
            logger.info(
                "users.system_role.grant",
                extra=log_context(user_id=user.id, operator_id=operator_id, role=role.value),
            )
        return serialize_user(user)

    def revoke_system_role(
        self,
        *,
        user_id: UUID,
        role: SystemRole,
        operator_id: UUID | None = None,
    ) -> UserOut:
        user = self.get_user(user_id=user_id)
        grant = next((item for item in user.system_roles if item.role == role), None)
        if grant is None:
            return serialize_user(user)
        if role == SystemRole.ADMIN:
            self._ensure_not_last_admin(user)

        user.system_roles.remove(grant)
        self._session.flush()
        logger.info(
            "users.system_role.revoke",
            extra=log_context(user_id=user.id, operator_id=operator_id, role=role.value),
        )
        return serialize_user(user)

    def _ensure_not_last_admin(self, user: User) -> None:
        stmt = (
            select(func.count(UserSystemRole.id))
            .join(User, User.id == UserSystemRole.user_id)
            .where(
                UserSystemRole.role == SystemRole.ADMIN,
                UserSystemRole.user_id != user.id,
                User.status == UserStatus.ACTIVE,
            )
        )
        if self._session.execute(stmt).scalar_one() == 0:
            raise InvariantViolationError("Cannot remove the last active system administrator")


__all__ = ["UsersService", "serialize_user"]
