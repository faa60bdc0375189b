"""Per-team role management."""

from __future__ import annotations

import logging
import re
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.auth.errors import PermissionDeniedError
from console_api.core.errors import ConflictError, InvariantViolationError, NotFoundError
from console_api.features.menus.service import MenusService
from console_api.features.teams.authority import AdminAuthority
from console_api.settings import Settings
from console_db.models import Team, TeamMember, TeamRole

from .schemas import TeamRoleCreate, TeamRoleListResponse, TeamRoleOut, TeamRoleUpdate

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"[^a-z0-9]+")


def _slugify(value: str) -> str:
    normalized = _CODE_RE.sub("-", value.strip().lower()).strip("-")
    return normalized[:64] or "role"


class TeamRolesService:
    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        authority: AdminAuthority | None = None,
    ) -> None:
        self._session = session
        self._authority = authority or AdminAuthority(session=session)
        self._menus = MenusService(session=session, settings=settings, authority=self._authority)

    def _serialize(self, role: TeamRole, *, member_count: int | None = None) -> TeamRoleOut:
        if member_count is None:
            member_count = self._member_count(role.id)
        return TeamRoleOut(
            id=role.id,
            team_id=role.team_id,
            name=role.name,
            code=role.code,
            is_admin=role.is_admin,
            member_count=member_count,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )

    def _member_count(self, role_id: UUID) -> int:
        stmt = select(func.count(TeamMember.id)).where(TeamMember.team_role_id == role_id)
        return self._session.execute(stmt).scalar_one()

    def get_role(self, *, role_id: UUID) -> TeamRole:
        role = self._session.get(TeamRole, role_id)
        if role is None:
            raise NotFoundError("Team role not found")
        return role

    def list_roles(self, *, team_id: UUID) -> TeamRoleListResponse:
        if self._session.get(Team, team_id) is None:
            raise NotFoundError("Team not found")
        counts = dict(
            self._session.execute(
                select(TeamMember.team_role_id, func.count(TeamMember.id))
                .where(TeamMember.team_id == team_id)
                .group_by(TeamMember.team_role_id)
            ).all()
        )
        roles = self._session.execute(
            select(TeamRole)
            .where(TeamRole.team_id == team_id)
            .order_by(TeamRole.is_admin.desc(), TeamRole.name.asc())
        ).scalars()
        return TeamRoleListResponse(
            items=[self._serialize(role, member_count=counts.get(role.id, 0)) for role in roles]
        )

    def create_role(
        self,
        *,
        team_id: UUID,
        payload: TeamRoleCreate,
        operator_id: UUID,
    ) -> TeamRoleOut:
        if self._session.get(Team, team_id) is None:
            raise NotFoundError("Team not found")
        self._authority.require_team_authority(operator_id, team_id, action="create team role")

        name = payload.name.strip()
        code = payload.code or _slugify(name)
        self._ensure_unique(team_id=team_id, name=name, code=code)

        role = TeamRole(team_id=team_id, name=name, code=code, is_admin=payload.is_admin)
        self._session.add(role)
        self._flush(role)

        if payload.seed_from_fallback:
            self._menus.write_role_menus(
                role_id=role.id,
                menu_ids=sorted(self._menus.fallback_menu_ids(), key=str),
            )

        logger.info(
            "team_roles.create.success",
            extra=log_context(team_id=team_id, role_id=role.id, operator_id=operator_id),
        )
        return self._serialize(role, member_count=0)

    def update_role(
        self,
        *,
        role_id: UUID,
        payload: TeamRoleUpdate,
        operator_id: UUID,
    ) -> TeamRoleOut:
        role = self.get_role(role_id=role_id)
        self._authority.require_team_authority(operator_id, role.team_id, action="update team role")

        updates = payload.model_dump(exclude_unset=True)
        name = updates["name"].strip() if updates.get("name") else None
        code = updates.get("code")
        self._ensure_unique(team_id=role.team_id, name=name, code=code, exclude_id=role.id)
        if updates.get("is_admin") is False and role.is_admin and self._member_count(role.id) > 0:
            raise PermissionDeniedError(
                "update team role",
                team_id=str(role.team_id),
                reason="Cannot revoke admin from a role held by team administrators",
            )

        if name is not None:
            role.name = name
        if code is not None:
            role.code = code
        if updates.get("is_admin") is not None:
            role.is_admin = bool(updates["is_admin"])
        self._flush(role)

        logger.info(
            "team_roles.update.success",
            extra=log_context(
                team_id=role.team_id,
                role_id=role.id,
                operator_id=operator_id,
                fields=sorted(updates),
            ),
        )
        return self._serialize(role)

    def delete_role(self, *, role_id: UUID, operator_id: UUID) -> None:
        role = self.get_role(role_id=role_id)
        self._authority.require_team_authority(operator_id, role.team_id, action="delete team role")

        if self._member_count(role.id) > 0:
            raise InvariantViolationError("Team role is still assigned to members")

        team_id = role.team_id
        self._session.delete(role)
        self._session.flush()
        logger.info(
            "team_roles.delete.success",
            extra=log_context(team_id=team_id, role_id=role_id, operator_id=operator_id),
        )

    def _ensure_unique(
        self,
        *,
        team_id: UUID,
        name: str | None,
        code: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        for column, value, label in (
            (TeamRole.name, name, "name"),
            (TeamRole.code, code, "code"),
        ):
            if value is None:
                continue
            stmt = select(TeamRole.id).where(TeamRole.team_id == team_id, column == value)
            if exclude_id is not None:
                stmt = stmt.where(TeamRole.id != exclude_id)
            if self._session.execute(stmt.limit(1)).first() is not None:
                raise ConflictError(f"A role with this {label} already exists in the team")

    def _flush(self, role: TeamRole) -> None:
        try:
            self._session.flush([role])
        except IntegrityError as exc:
            raise ConflictError("A role with this name or code already exists in the team") from exc


__all__ = ["TeamRolesService"]
