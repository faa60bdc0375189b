"""Menu listing, visibility resolution and association replacement."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from console_api.common.logging import log_context
from console_api.core.auth.errors import PermissionDeniedError
from console_api.core.errors import NotFoundError
from console_api.features.teams.authority import AdminAuthority
from console_api.settings import Settings
from console_db.models import Menu, SystemRole, SystemRoleMenu, TeamMember, TeamRole, TeamRoleMenu

from .schemas import MenuIdsOut, MenuTreeResponse
from .tree import build_menu_tree
from .visibility import resolve_visible_menu_ids

logger = logging.getLogger(__name__)


def _dedupe(menu_ids: Iterable[UUID]) -> list[UUID]:
    return list(dict.fromkeys(menu_ids))


def _ids_out(menu_ids: Iterable[UUID]) -> MenuIdsOut:
    return MenuIdsOut(menu_ids=sorted(set(menu_ids), key=str))


class MenusService:
    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        authority: AdminAuthority | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._authority = authority or AdminAuthority(session=session)

    # -- Snapshots ---------------------------------------------------------

    def load_menus(self) -> list[Menu]:
        stmt = select(Menu).order_by(Menu.sort_order.asc(), Menu.path.asc())
        return list(self._session.execute(stmt).scalars().all())

    def fallback_menu_ids(self) -> set[UUID]:
        stmt = select(SystemRoleMenu.menu_id).where(SystemRoleMenu.role == SystemRole.USER)
        return set(self._session.execute(stmt).scalars().all())

    def team_menu_ids(self, *, user_id: UUID, team_id: UUID) -> set[UUID]:
        """Menus granted by the user's role in ``team_id``; empty without membership."""

        stmt = (
            select(TeamRoleMenu.menu_id)
            .join(TeamMember, TeamMember.team_role_id == TeamRoleMenu.team_role_id)
            .where(TeamMember.user_id == user_id, TeamMember.team_id == team_id)
        )
        return set(self._session.execute(stmt).scalars().all())

    # -- Read paths --------------------------------------------------------

    def list_tree(self) -> MenuTreeResponse:
        return MenuTreeResponse.from_nodes(build_menu_tree(self.load_menus()))

    def visible_menu_ids(
        self,
        *,
        user_id: UUID,
        team_id: UUID | None = None,
        menus: list[Menu] | None = None,
    ) -> frozenset[UUID]:
        if menus is None:
            menus = self.load_menus()
        is_admin = self._authority.is_system_admin(user_id)
        team_menu_ids: set[UUID] | None = None
        if team_id is not None and not is_admin:
            team_menu_ids = self.team_menu_ids(user_id=user_id, team_id=team_id)
        return resolve_visible_menu_ids(
            menus,
            is_system_admin=is_admin,
            fallback_ids=self.fallback_menu_ids() if not is_admin else (),
            team_menu_ids=team_menu_ids,
            mode=self._settings.menu_visibility_mode,
        )

    def visible_tree(self, *, user_id: UUID, team_id: UUID | None = None) -> MenuTreeResponse:
        menus = self.load_menus()
        visible = self.visible_menu_ids(user_id=user_id, team_id=team_id, menus=menus)
        logger.debug(
            "menus.visible.resolve",
            extra=log_context(user_id=user_id, team_id=team_id, visible_count=len(visible)),
        )
        return MenuTreeResponse.from_nodes(build_menu_tree(menus, visible))

    def get_fallback(self) -> MenuIdsOut:
        return _ids_out(self.fallback_menu_ids())

    def get_role_menus(self, *, role_id: UUID, viewer_id: UUID | None = None) -> MenuIdsOut:
        """Menus granted to a role; a ``viewer_id`` must belong to or administer its team."""

        role = self._get_role(role_id)
        if viewer_id is not None and not self._can_view_team(viewer_id, role.team_id):
            raise PermissionDeniedError("view role menus", team_id=str(role.team_id))
        stmt = select(TeamRoleMenu.menu_id).where(TeamRoleMenu.team_role_id == role_id)
        return _ids_out(self._session.execute(stmt).scalars().all())

    # -- Replace-all writes ------------------------------------------------

    def replace_fallback(
        self,
        menu_ids: Iterable[UUID],
        *,
        operator_id: UUID | None = None,
    ) -> MenuIdsOut:
        unique_ids = self._validate_menu_ids(menu_ids)
        with self._session.begin_nested():
            self._session.execute(
                delete(SystemRoleMenu).where(SystemRoleMenu.role == SystemRole.USER)
            )
            self._session.add_all(
                SystemRoleMenu(role=SystemRole.USER, menu_id=menu_id) for menu_id in unique_ids
            )
        logger.info(
            "menus.fallback.replace",
            extra=log_context(operator_id=operator_id, menu_count=len(unique_ids)),
        )
        return _ids_out(unique_ids)

    def replace_role_menus(
        self,
        *,
        role_id: UUID,
        menu_ids: Iterable[UUID],
        operator_id: UUID,
    ) -> MenuIdsOut:
        role = self._get_role(role_id)
        self._authority.require_team_authority(
            operator_id, role.team_id, action="update role menus"
        )
        unique_ids = self._validate_menu_ids(menu_ids)
        self.write_role_menus(role_id=role.id, menu_ids=unique_ids)
        logger.info(
            "menus.role.replace",
            extra=log_context(
                team_id=role.team_id,
                role_id=role.id,
                operator_id=operator_id,
                menu_count=len(unique_ids),
            ),
        )
        return _ids_out(unique_ids)

    def write_role_menus(self, *, role_id: UUID, menu_ids: list[UUID]) -> None:
        """Swap the role's association rows inside one savepoint."""

        with self._session.begin_nested():
            self._session.execute(delete(TeamRoleMenu).where(TeamRoleMenu.team_role_id == role_id))
            self._session.add_all(
                TeamRoleMenu(team_role_id=role_id, menu_id=menu_id) for menu_id in menu_ids
            )

    # -- Helpers -----------------------------------------------------------

    def _can_view_team(self, user_id: UUID, team_id: UUID) -> bool:
        stmt = select(TeamMember.id).where(
            TeamMember.user_id == user_id,
            TeamMember.team_id == team_id,
        )
        if self._session.execute(stmt.limit(1)).first() is not None:
            return True
        return self._authority.can_administer(user_id, team_id)

    def _get_role(self, role_id: UUID) -> TeamRole:
        role = self._session.get(TeamRole, role_id)
        if role is None:
            raise NotFoundError("Team role not found")
        return role

    def _validate_menu_ids(self, menu_ids: Iterable[UUID]) -> list[UUID]:
        unique_ids = _dedupe(menu_ids)
        if not unique_ids:
            return []
        stmt = select(Menu.id).where(Menu.id.in_(unique_ids))
        known = set(self._session.execute(stmt).scalars().all())
        missing = [str(menu_id) for menu_id in unique_ids if menu_id not in known]
        if missing:
            raise NotFoundError(f"Menu not found: {', '.join(missing)}")
        return unique_ids


__all__ = ["MenusService"]
