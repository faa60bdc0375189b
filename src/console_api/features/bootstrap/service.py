"""Idempotent seeding of the administrator, default menus and the root team.

Every step looks the row up by its natural key first, so running the seed
repeatedly never duplicates data and never overwrites later edits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.security import hash_password
from console_api.settings import Settings
from console_db.models import (
    ROOT_TEAM_ID,
    Menu,
    SystemRole,
    Team,
    TeamMember,
    TeamRole,
    User,
    UserStatus,
    UserSystemRole,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MenuSeed:
    name: str
    path: str
    icon: str
    sort_order: int
    parent_path: str | None = None


DEFAULT_MENUS: tuple[MenuSeed, ...] = (
    MenuSeed(name="System", path="/admin", icon="settings", sort_order=1),
    MenuSeed(name="Users", path="/admin/users", icon="users", sort_order=1, parent_path="/admin"),
    MenuSeed(name="Teams", path="/admin/teams", icon="building", sort_order=2, parent_path="/admin"),
    MenuSeed(name="Menus", path="/admin/menus", icon="menu", sort_order=3, parent_path="/admin"),
)
ROOT_TEAM_NAME = "System Administration"
ROOT_TEAM_DESCRIPTION = "Dedicated team for system administrators"
ROOT_ADMIN_ROLE = ("Administrator", "admin")


@dataclass(slots=True)
class BootstrapResult:
    admin_user_id: UUID
    created: list[str] = field(default_factory=list)


class BootstrapService:
    def __init__(self, *, session: Session, settings: Settings) -> None:
        self._session = session
        self._settings = settings

    def run(self, *, admin_password: str | None = None) -> BootstrapResult:
        password = admin_password
        if password is None and self._settings.bootstrap_admin_password is not None:
            password = self._settings.bootstrap_admin_password.get_secret_value()
        if not password:
            raise ValueError("An administrator password is required to bootstrap.")

        created: list[str] = []
        admin = self._ensure_admin(password, created)
        self._ensure_menus(created)
        role = self._ensure_root_team(created)
        self._ensure_membership(admin, role, created)
        self._session.flush()

        logger.info(
            "bootstrap.complete",
            extra=log_context(user_id=admin.id, team_id=ROOT_TEAM_ID, created=created),
        )
        return BootstrapResult(admin_user_id=admin.id, created=created)

    def _ensure_admin(self, password: str, created: list[str]) -> User:
        email = self._settings.bootstrap_admin_email
        admin = self._session.execute(
            select(User).where(User.email_normalized == email.strip().lower())
        ).scalar_one_or_none()
        if admin is None:
            admin = User(
                email=email,
                display_name=self._settings.bootstrap_admin_name,
                hashed_password=hash_password(password),
                status=UserStatus.ACTIVE,
            )
            self._session.add(admin)
            created.append("admin_user")
        for role in (SystemRole.ADMIN, SystemRole.USER):
            if role not in admin.role_values:
                admin.system_roles.append(UserSystemRole(role=role))
                created.append(f"system_role:{role.value}")
        self._session.flush()
        return admin

    def _ensure_menus(self, created: list[str]) -> None:
        by_path = {menu.path: menu for menu in self._session.execute(select(Menu)).scalars()}
        for seed in DEFAULT_MENUS:
            if seed.path in by_path:
                continue
            parent = by_path.get(seed.parent_path) if seed.parent_path else None
            menu = Menu(
                name=seed.name,
                path=seed.path,
                icon=seed.icon,
                sort_order=seed.sort_order,
                parent_id=parent.id if parent is not None else None,
            )
            self._session.add(menu)
            self._session.flush([menu])
            by_path[seed.path] = menu
            created.append(f"menu:{seed.path}")

    def _ensure_root_team(self, created: list[str]) -> TeamRole:
        team = self._session.get(Team, ROOT_TEAM_ID)
        if team is None:
            team = Team(id=ROOT_TEAM_ID, name=ROOT_TEAM_NAME, description=ROOT_TEAM_DESCRIPTION)
            self._session.add(team)
            self._session.flush([team])
            created.append("root_team")

        name, code = ROOT_ADMIN_ROLE
        role = self._session.execute(
            select(TeamRole).where(TeamRole.team_id == team.id, TeamRole.code == code)
        ).scalar_one_or_none()
        if role is None:
            role = TeamRole(team_id=team.id, name=name, code=code, is_admin=True)
            self._session.add(role)
            self._session.flush([role])
            created.append("root_admin_role")
        return role

    def _ensure_membership(self, admin: User, role: TeamRole, created: list[str]) -> None:
        member = self._session.execute(
            select(TeamMember).where(
                TeamMember.user_id == admin.id,
                TeamMember.team_id == role.team_id,
            )
        ).scalar_one_or_none()
        if member is None:
            self._session.add(
                TeamMember(user_id=admin.id, team_id=role.team_id, team_role_id=role.id)
            )
            created.append("root_membership")
        elif member.team_role_id != role.id:
            member.team_role_id = role.id


__all__ = ["DEFAULT_MENUS", "BootstrapResult", "BootstrapService", "ROOT_TEAM_NAME"]
