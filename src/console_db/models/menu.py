"""Navigation menu forest and its role associations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from console_db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin

from .user import SystemRole, system_role_enum


class Menu(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Node in the menu forest; ``path`` is the stable key."""

    __tablename__ = "menus"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    path: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parent_id: Mapped[UUID | None] = mapped_column(
        GUID(),
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=True,
    )

    __table_args__ = (Index("ix_menus_parent_id", "parent_id"),)


class SystemRoleMenu(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Menu granted to a system role; the USER rows form the fallback set."""

    __tablename__ = "system_role_menus"

    role: Mapped[SystemRole] = mapped_column(system_role_enum, nullable=False)
    menu_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("role", "menu_id", name="uq_system_role_menus_role_menu"),)


class TeamRoleMenu(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Menu granted to a team role."""

    __tablename__ = "team_role_menus"

    team_role_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("team_roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    menu_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("team_role_id", "menu_id", name="uq_team_role_menus_role_menu"),
    )


__all__ = ["Menu", "SystemRoleMenu", "TeamRoleMenu"]
