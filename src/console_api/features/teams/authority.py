"""Admin authority checks for team-scoped mutations.

An operator may act on a team when they hold the ADMIN system role or an
admin team role on that team or any of its ancestors. Authority therefore
flows downward through the hierarchy.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.auth.errors import PermissionDeniedError
from console_db.models import SystemRole, TeamMember, TeamRole, UserSystemRole

from .hierarchy import TeamHierarchy

logger = logging.getLogger(__name__)


class AdminAuthority:
    """Resolve whether a user administers a team."""

    def __init__(self, *, session: Session, hierarchy: TeamHierarchy | None = None) -> None:
        self._session = session
        self._hierarchy = hierarchy

    @property
    def hierarchy(self) -> TeamHierarchy:
        if self._hierarchy is None:
            self._hierarchy = TeamHierarchy.load(self._session)
        return self._hierarchy

    def is_system_admin(self, user_id: UUID) -> bool:
        stmt = select(UserSystemRole.id).where(
            UserSystemRole.user_id == user_id,
            UserSystemRole.role == SystemRole.ADMIN,
        )
        return self._session.execute(stmt.limit(1)).first() is not None

    def admin_team_ids(self, user_id: UUID) -> set[UUID]:
        """Teams where ``user_id`` holds a role flagged ``is_admin``."""

        stmt = (
            select(TeamMember.team_id)
            .join(TeamRole, TeamRole.id == TeamMember.team_role_id)
            .where(TeamMember.user_id == user_id, TeamRole.is_admin.is_(True))
        )
        return set(self._session.execute(stmt).scalars().all())

    def is_team_admin(self, user_id: UUID, team_id: UUID) -> bool:
        return team_id in self.admin_team_ids(user_id)

    def is_team_or_ancestor_admin(self, user_id: UUID, team_id: UUID) -> bool:
        admin_teams = self.admin_team_ids(user_id)
        if not admin_teams:
            return False
        if team_id in admin_teams:
            return True
        return any(ancestor in admin_teams for ancestor in self.hierarchy.ancestors_of(team_id))

    def can_administer(self, operator_id: UUID, team_id: UUID) -> bool:
        return self.is_system_admin(operator_id) or self.is_team_or_ancestor_admin(
            operator_id, team_id
        )

    def require_team_authority(
        self,
        operator_id: UUID,
        team_id: UUID,
        *,
        action: str,
    ) -> None:
        """Raise :class:`PermissionDeniedError` unless the operator administers ``team_id``."""

        if self.can_administer(operator_id, team_id):
            return
        logger.info(
            "authority.denied",
            extra=log_context(operator_id=operator_id, team_id=team_id, action=action),
        )
        raise PermissionDeniedError(action, team_id=str(team_id))

    @staticmethod
    def ensure_role_change_allowed(member: TeamMember) -> None:
        """Refuse to change the role of a member who currently holds an admin role."""

        if member.team_role.is_admin:
            raise PermissionDeniedError(
                "change member role",
                team_id=str(member.team_id),
                reason="Cannot change the role of a team administrator",
            )


__all__ = ["AdminAuthority"]
