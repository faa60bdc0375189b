"""Team lifecycle: creation with default roles, re-parenting and deletion."""

from __future__ import annotations

import logging
from collections import defaultdict
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.auth.errors import PermissionDeniedError
from console_api.core.errors import InvariantViolationError, NotFoundError
from console_db.models import ROOT_TEAM_ID, Team, TeamMember, TeamRole, TeamRoleMenu, User

from .authority import AdminAuthority
from .hierarchy import TeamHierarchy
from .schemas import (
    MyTeamOut,
    MyTeamsResponse,
    TeamCreate,
    TeamDetailOut,
    TeamListResponse,
    TeamOut,
    TeamSummary,
    TeamTreeNode,
    TeamTreeResponse,
    TeamUpdate,
)

logger = logging.getLogger(__name__)

# (name, code, is_admin) for the roles every new team starts with.
DEFAULT_TEAM_ROLES: tuple[tuple[str, str, bool], ...] = (
    ("Team Admin", "admin", True),
    ("Developer", "developer", False),
)
TEAM_TREE_DEPTH = 3


def serialize_team(team: Team) -> TeamOut:
    return TeamOut(
        id=team.id,
        name=team.name,
        description=team.description,
        parent_id=team.parent_id,
        is_root=team.is_root_team,
        created_at=team.created_at,
        updated_at=team.updated_at,
    )


class TeamsService:
    def __init__(self, *, session: Session, authority: AdminAuthority | None = None) -> None:
        self._session = session
        self._authority = authority or AdminAuthority(session=session)

    # -- Queries -----------------------------------------------------------

    def get_team(self, *, team_id: UUID) -> Team:
        team = self._session.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    def get_team_detail(self, *, team_id: UUID) -> TeamDetailOut:
        team = self.get_team(team_id=team_id)
        children = self._session.execute(
            select(Team).where(Team.parent_id == team.id).order_by(Team.name.asc())
        ).scalars()
        member_count = self._session.execute(
            select(func.count(TeamMember.id)).where(TeamMember.team_id == team.id)
        ).scalar_one()
        role_count = self._session.execute(
            select(func.count(TeamRole.id)).where(TeamRole.team_id == team.id)
        ).scalar_one()
        base = serialize_team(team)
        return TeamDetailOut(
            **base.model_dump(),
            parent=TeamSummary(id=team.parent.id, name=team.parent.name) if team.parent else None,
            children=[TeamSummary(id=child.id, name=child.name) for child in children],
            member_count=member_count,
            role_count=role_count,
        )

    def visible_team_ids(self, *, user: User) -> set[UUID] | None:
        """Teams ``user`` may browse; ``None`` means every team."""

        if self._authority.is_system_admin(user.id):
            return None
        member_team_ids = set(
            self._session.execute(
                select(TeamMember.team_id).where(TeamMember.user_id == user.id)
            ).scalars()
        )
        return member_team_ids | self._authority.hierarchy.descendants_of(member_team_ids)

    def list_teams(self, *, user: User) -> TeamListResponse:
        visible = self.visible_team_ids(user=user)
        stmt = select(Team).order_by(Team.name.asc(), Team.id.asc())
        if visible is not None:
            if not visible:
                return TeamListResponse(items=[])
            stmt = stmt.where(Team.id.in_(visible))
        teams = self._session.execute(stmt).scalars().all()
        return TeamListResponse(items=[serialize_team(team) for team in teams])

    def team_tree(self, *, user: User) -> TeamTreeResponse:
        """Nest the visible teams; a team whose parent is hidden becomes a root."""

        visible = self.visible_team_ids(user=user)
        teams = [
            team
            for team in self._session.execute(select(Team).order_by(Team.name.asc())).scalars()
            if visible is None or team.id in visible
        ]
        included = {team.id for team in teams}
        children: dict[UUID, list[Team]] = defaultdict(list)
        roots: list[Team] = []
        for team in teams:
            if team.parent_id is not None and team.parent_id in included:
                children[team.parent_id].append(team)
            else:
                roots.append(team)

        def to_node(team: Team, depth: int) -> TeamTreeNode:
            node = TeamTreeNode(id=team.id, name=team.name, parent_id=team.parent_id)
            if depth < TEAM_TREE_DEPTH:
                node.children = [to_node(child, depth + 1) for child in children[team.id]]
            return node

        return TeamTreeResponse(items=[to_node(team, 1) for team in roots])

    def list_user_teams(self, *, user_id: UUID) -> MyTeamsResponse:
        stmt = (
            select(TeamMember)
            .join(Team, Team.id == TeamMember.team_id)
            .where(TeamMember.user_id == user_id)
            .order_by(Team.name.asc())
        )
        memberships = self._session.execute(stmt).unique().scalars().all()
        return MyTeamsResponse(
            items=[
                MyTeamOut(
                    team_id=member.team_id,
                    team_name=member.team.name,
                    role_id=member.team_role_id,
                    role_name=member.team_role.name,
                    role_code=member.team_role.code,
                    is_admin=member.team_role.is_admin,
                )
                for member in memberships
            ]
        )

    # -- Mutations ---------------------------------------------------------

    def create_team(self, payload: TeamCreate, *, operator_id: UUID) -> TeamOut:
        if "parent_id" in payload.model_fields_set and payload.parent_id is None:
            self._require_system_admin(operator_id, action="create a top-level team")
            parent_id = None
        else:
            parent_id = payload.parent_id or ROOT_TEAM_ID
            parent = self._session.get(Team, parent_id)
            if parent is None:
                raise NotFoundError("Parent team not found")
            self._authority.require_team_authority(
                operator_id, parent.id, action="create a child team"
            )

        team = Team(
            name=payload.name.strip(),
            description=payload.description,
            parent_id=parent_id,
        )
        self._session.add(team)
        self._session.flush([team])

        for name, code, is_admin in DEFAULT_TEAM_ROLES:
            self._session.add(TeamRole(team_id=team.id, name=name, code=code, is_admin=is_admin))
        self._session.flush()

        logger.info(
            "teams.create.success",
            extra=log_context(team_id=team.id, operator_id=operator_id, parent_id=parent_id),
        )
        return serialize_team(team)

    def update_team(self, *, team_id: UUID, payload: TeamUpdate, operator_id: UUID) -> TeamOut:
        team = self.get_team(team_id=team_id)
        self._authority.require_team_authority(operator_id, team.id, action="update team")

        updates = payload.model_dump(exclude_unset=True)
        if "parent_id" in updates and updates["parent_id"] != team.parent_id:
            self._check_new_parent(team, updates["parent_id"], operator_id=operator_id)
            team.parent_id = updates["parent_id"]
        if updates.get("name") is not None:
            team.name = updates["name"].strip()
        if "description" in updates:
            team.description = updates["description"]

        self._session.flush([team])
        logger.info(
            "teams.update.success",
            extra=log_context(team_id=team.id, operator_id=operator_id, fields=sorted(updates)),
        )
        return serialize_team(team)

    def delete_team(self, *, team_id: UUID, operator_id: UUID) -> None:
        team = self.get_team(team_id=team_id)
        if team.is_root_team:
            raise InvariantViolationError("The root team cannot be deleted")
        self._authority.require_team_authority(operator_id, team.id, action="delete team")

        has_children = self._session.execute(
            select(Team.id).where(Team.parent_id == team.id).limit(1)
        ).first()
        if has_children is not None:
            raise InvariantViolationError("Delete or move the child teams first")

        role_ids = select(TeamRole.id).where(TeamRole.team_id == team.id)
        with self._session.begin_nested():
            self._session.execute(delete(TeamMember).where(TeamMember.team_id == team.id))
            self._session.execute(
                delete(TeamRoleMenu).where(TeamRoleMenu.team_role_id.in_(role_ids))
            )
            self._session.execute(delete(TeamRole).where(TeamRole.team_id == team.id))
            self._session.delete(team)

        logger.info(
            "teams.delete.success",
            extra=log_context(team_id=team_id, operator_id=operator_id),
        )

    # -- Helpers -----------------------------------------------------------

    def _check_new_parent(self, team: Team, parent_id: UUID | None, *, operator_id: UUID) -> None:
        if team.is_root_team:
            raise InvariantViolationError("The root team cannot be moved")
        if parent_id is None:
            self._require_system_admin(operator_id, action="detach a team from its parent")
            return
        if parent_id == team.id:
            raise InvariantViolationError("A team cannot be its own parent")
        if self._session.get(Team, parent_id) is None:
            raise NotFoundError("Parent team not found")
        if self._authority.hierarchy.would_create_cycle(team.id, parent_id):
            raise InvariantViolationError("A team cannot be moved under its own descendant")
        self._authority.require_team_authority(operator_id, parent_id, action="move team")

    def _require_system_admin(self, operator_id: UUID, *, action: str) -> None:
        if not self._authority.is_system_admin(operator_id):
            raise PermissionDeniedError(action, reason="System administrator role required")


__all__ = ["DEFAULT_TEAM_ROLES", "TeamsService", "serialize_team"]
