"""Compute which menu ids a user may see.

Resolution order:

1. System admins see every menu.
2. The USER fallback set applies when no team context is given.
3. With a team context, the menus of the user's team role replace the
   fallback when that set is non-empty (``mode="union"`` merges them instead).
4. Every ancestor of a visible menu is added so no visible node is orphaned.

The resolver never raises; an empty result is a valid answer.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from typing import Literal
from uuid import UUID

from .tree import MenuLike

VisibilityMode = Literal["replace", "union"]


def complete_ancestors(
    menu_ids: Iterable[UUID],
    parents: dict[UUID, UUID | None],
) -> set[UUID]:
    """Add every parent-chain id of ``menu_ids`` that exists in ``parents``."""

    completed: set[UUID] = set()
    for menu_id in menu_ids:
        current: UUID | None = menu_id
        while current is not None and current in parents and current not in completed:
            completed.add(current)
            current = parents[current]
    return completed


def resolve_visible_menu_ids(
    menus: Sequence[MenuLike],
    *,
    is_system_admin: bool,
    fallback_ids: Collection[UUID],
    team_menu_ids: Collection[UUID] | None = None,
    mode: VisibilityMode = "replace",
) -> frozenset[UUID]:
    """Return the closed set of visible menu ids.

    ``team_menu_ids`` is ``None`` when no team context was requested and an
    empty collection when the user has no membership or the role has no
    menus configured.
    """

    if is_system_admin:
        return frozenset(menu.id for menu in menus)

    base: set[UUID] = set(fallback_ids)
    if team_menu_ids:
        if mode == "union":
            base |= set(team_menu_ids)
        else:
            base = set(team_menu_ids)

    parents = {menu.id: menu.parent_id for menu in menus}
    return frozenset(complete_ancestors(base, parents))


__all__ = ["VisibilityMode", "complete_ancestors", "resolve_visible_menu_ids"]
