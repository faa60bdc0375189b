"""Team membership: add, re-role and remove members under admin authority."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.errors import ConflictError, NotFoundError, ValidationFailedError
from console_api.features.teams.authority import AdminAuthority
from console_db.models import Team, TeamMember, TeamRole, User

from .schemas import MemberAdd, MemberListResponse, MemberOut, MemberRoleUpdate

logger = logging.getLogger(__name__)


def serialize_member(member: TeamMember) -> MemberOut:
    return MemberOut(
        id=member.id,
        team_id=member.team_id,
        user_id=member.user_id,
        email=member.user.email,
        display_name=member.user.display_name,
        team_role_id=member.team_role_id,
        role_name=member.team_role.name,
        role_code=member.team_role.code,
        is_admin=member.team_role.is_admin,
        created_at=member.created_at,
    )


class MembersService:
    def __init__(self, *, session: Session, authority: AdminAuthority | None = None) -> None:
        self._session = session
        self._authority = authority or AdminAuthority(session=session)

    def _get_team(self, team_id: UUID) -> Team:
        team = self._session.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    def _get_team_role(self, *, team_id: UUID, role_id: UUID) -> TeamRole:
        role = self._session.get(TeamRole, role_id)
        if role is None:
            raise NotFoundError("Team role not found")
        if role.team_id != team_id:
            raise ValidationFailedError("Team role belongs to a different team")
        return role

    def _find_member(self, *, team_id: UUID, user_id: UUID) -> TeamMember | None:
        stmt = select(TeamMember).where(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list_members(self, *, team_id: UUID) -> MemberListResponse:
        self._get_team(team_id)
        stmt = (
            select(TeamMember)
            .join(User, User.id == TeamMember.user_id)
            .where(TeamMember.team_id == team_id)
            .order_by(User.email_normalized.asc())
        )
        members = self._session.execute(stmt).scalars().all()
        return MemberListResponse(items=[serialize_member(member) for member in members])

    def add_member(self, *, team_id: UUID, payload: MemberAdd, operator_id: UUID) -> MemberOut:
        self._get_team(team_id)
        self._authority.require_team_authority(operator_id, team_id, action="add team member")

        if self._session.get(User, payload.user_id) is None:
            raise NotFoundError("User not found")
        role = self._get_team_role(team_id=team_id, role_id=payload.team_role_id)
        if self._find_member(team_id=team_id, user_id=payload.user_id) is not None:
            raise ConflictError("User is already a member of this team")

        member = TeamMember(user_id=payload.user_id, team_id=team_id, team_role_id=role.id)
        self._session.add(member)
        try:
            self._session.flush([member])
        except IntegrityError as exc:
            raise ConflictError("User is already a member of this team") from exc
        self._session.refresh(member)

        logger.info(
            "members.add.success",
            extra=log_context(
                team_id=team_id,
                user_id=payload.user_id,
                role_id=role.id,
                operator_id=operator_id,
            ),
        )
        return serialize_member(member)

    def update_member_role(
        self,
        *,
        team_id: UUID,
        user_id: UUID,
        payload: MemberRoleUpdate,
        operator_id: UUID,
    ) -> MemberOut:
        self._get_team(team_id)
        self._authority.require_team_authority(
            operator_id, team_id, action="change member role"
        )
        member = self._find_member(team_id=team_id, user_id=user_id)
        if member is None:
            raise NotFoundError("Team membership not found")
        self._authority.ensure_role_change_allowed(member)

        role = self._get_team_role(team_id=team_id, role_id=payload.team_role_id)
        member.team_role_id = role.id
        self._session.flush([member])
        self._session.refresh(member)

        logger.info(
            "members.update_role.success",
            extra=log_context(
                team_id=team_id,
                user_id=user_id,
                role_id=role.id,
                operator_id=operator_id,
            ),
        )
        return serialize_member(member)

    def remove_member(self, *, team_id: UUID, user_id: UUID, operator_id: UUID) -> None:
        self._get_team(team_id)
        self._authority.require_team_authority(
            operator_id, team_id, action="remove team member"
        )
        member = self._find_member(team_id=team_id, user_id=user_id)
        if member is None:
            raise NotFoundError("Team membership not found")

        self._session.delete(member)
        self._session.flush()
        logger.info(
            "members.remove.success",
            extra=log_context(team_id=team_id, user_id=user_id, operator_id=operator_id),
        )


__all__ = ["MembersService", "serialize_member"]
