"""Team hierarchy, per-team roles and memberships."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from console_db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin

from .user import User

# Fixed identifier of the system administration team; it can never be deleted.
ROOT_TEAM_ID = UUID("00000000-0000-0000-0000-000000000001")


class Team(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Node in the team forest."""

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    parent_id: Mapped[UUID | None] = mapped_column(
        GUID(),
        ForeignKey("teams.id", ondelete="NO ACTION"),
        nullable=True,
    )

    parent: Mapped[Team | None] = relationship("Team", remote_side="Team.id")

    __table_args__ = (Index("ix_teams_parent_id", "parent_id"),)

    @property
    def is_root_team(self) -> bool:
        return self.id == ROOT_TEAM_ID


class TeamRole(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Named permission bundle scoped to one team."""

    __tablename__ = "team_roles"

    team_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    team: Mapped[Team] = relationship("Team")

    __table_args__ = (
        UniqueConstraint("team_id", "name", name="uq_team_roles_team_name"),
        UniqueConstraint("team_id", "code", name="uq_team_roles_team_code"),
    )


class TeamMember(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Membership of a user in a team, carrying exactly one team role."""

    __tablename__ = "team_members"

    user_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    team_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
    )
    team_role_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("team_roles.id", ondelete="NO ACTION"),
        nullable=False,
    )

    user: Mapped[User] = relationship("User", lazy="joined")
    team: Mapped[Team] = relationship("Team", lazy="joined")
    team_role: Mapped[TeamRole] = relationship("TeamRole", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_team_members_user_team"),
        Index("ix_team_members_team_id", "team_id"),
        Index("ix_team_members_team_role_id", "team_role_id"),
    )


__all__ = ["ROOT_TEAM_ID", "Team", "TeamMember", "TeamRole"]
