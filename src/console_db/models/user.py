"""User identity and system-level role grants."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from console_db import GUID, Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def _normalise_email(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        msg = "Email must not be empty"
        raise ValueError(msg)
    return cleaned


def _clean_display_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    return cleaned[:255]


class UserStatus(str, Enum):
    """Account lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class SystemRole(str, Enum):
    """Global grants that apply independently of team membership."""

    ADMIN = "ADMIN"
    USER = "USER"


user_status_enum = SAEnum(
    UserStatus,
    name="user_status",
    native_enum=False,
    length=20,
    values_callable=_enum_values,
)

system_role_enum = SAEnum(
    SystemRole,
    name="system_role",
    native_enum=False,
    length=20,
    values_callable=_enum_values,
)


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Single identity model for console users."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    email_normalized: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[UserStatus] = mapped_column(
        user_status_enum,
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    system_roles: Mapped[list[UserSystemRole]] = relationship(
        "UserSystemRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @validates("email")
    def _store_normalised_email(self, _key: str, value: str) -> str:
        cleaned = _normalise_email(value)
        self.email_normalized = cleaned.lower()
        return cleaned

    @validates("display_name")
    def _trim_display_name(self, _key: str, value: str | None) -> str | None:
        return _clean_display_name(value)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def role_values(self) -> set[SystemRole]:
        return {grant.role for grant in self.system_roles}

    @property
    def label(self) -> str:
        return self.display_name or self.email


class UserSystemRole(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One system role held by a user; a user may hold several."""

    __tablename__ = "user_system_roles"

    user_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[SystemRole] = mapped_column(system_role_enum, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="system_roles")

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_system_roles_user_role"),)


__all__ = [
    "SystemRole",
    "User",
    "UserStatus",
    "UserSystemRole",
    "system_role_enum",
]
