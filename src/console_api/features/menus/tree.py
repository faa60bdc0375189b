"""Shape a flat menu list into the nested navigation tree."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

MAX_MENU_DEPTH = 3


class MenuLike(Protocol):
    id: UUID
    parent_id: UUID | None
    name: str
    path: str
    icon: str | None
    sort_order: int


@dataclass(slots=True)
class MenuTreeNode:
    id: UUID
    name: str
    path: str
    icon: str | None
    sort_order: int
    parent_id: UUID | None
    children: list[MenuTreeNode] = field(default_factory=list)

    def iter_ids(self) -> Iterable[UUID]:
        yield self.id
        for child in self.children:
            yield from child.iter_ids()


def _sort_key(menu: MenuLike) -> tuple[int, str]:
    return (menu.sort_order, menu.path)


def build_menu_tree(
    menus: Sequence[MenuLike],
    visible_ids: Collection[UUID] | None = None,
    *,
    max_depth: int = MAX_MENU_DEPTH,
) -> list[MenuTreeNode]:
    """Nest ``menus`` under their parents, keeping only ``visible_ids``.

    ``visible_ids=None`` keeps every menu. A node is attached only beneath a
    parent that was itself attached, and nothing deeper than ``max_depth``
    levels is emitted.
    """

    def visible(menu: MenuLike) -> bool:
        return visible_ids is None or menu.id in visible_ids

    children_by_parent: dict[UUID, list[MenuLike]] = defaultdict(list)
    roots: list[MenuLike] = []
    for menu in menus:
        if not visible(menu):
            continue
        if menu.parent_id is None:
            roots.append(menu)
        else:
            children_by_parent[menu.parent_id].append(menu)

    def to_node(menu: MenuLike, depth: int) -> MenuTreeNode:
        node = MenuTreeNode(
            id=menu.id,
            name=menu.name,
            path=menu.path,
            icon=menu.icon,
            sort_order=menu.sort_order,
            parent_id=menu.parent_id,
        )
        if depth < max_depth:
            node.children = [
                to_node(child, depth + 1)
                for child in sorted(children_by_parent.get(menu.id, ()), key=_sort_key)
            ]
        return node

    if max_depth < 1:
        return []
    return [to_node(root, 1) for root in sorted(roots, key=_sort_key)]


def flatten_tree_ids(nodes: Iterable[MenuTreeNode]) -> set[UUID]:
    """Return every id present anywhere in ``nodes``."""

    ids: set[UUID] = set()
    for node in nodes:
        ids.update(node.iter_ids())
    return ids


__all__ = ["MAX_MENU_DEPTH", "MenuLike", "MenuTreeNode", "build_menu_tree", "flatten_tree_ids"]
