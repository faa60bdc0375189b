"""Pydantic schemas for menu payloads."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from console_api.common.schema import BaseSchema

from .tree import MenuTreeNode


class MenuNodeOut(BaseSchema):
    id: UUID
    name: str
    path: str
    icon: str | None = None
    sort_order: int
    parent_id: UUID | None = None
    children: list[MenuNodeOut] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: MenuTreeNode) -> MenuNodeOut:
        return cls(
            id=node.id,
            name=node.name,
            path=node.path,
            icon=node.icon,
            sort_order=node.sort_order,
            parent_id=node.parent_id,
            children=[cls.from_node(child) for child in node.children],
        )


MenuNodeOut.model_rebuild()


class MenuTreeResponse(BaseSchema):
    items: list[MenuNodeOut]

    @classmethod
    def from_nodes(cls, nodes: list[MenuTreeNode]) -> MenuTreeResponse:
        return cls(items=[MenuNodeOut.from_node(node) for node in nodes])


class MenuIdsOut(BaseSchema):
    menu_ids: list[UUID]


class MenuIdsUpdate(BaseSchema):
    menu_ids: list[UUID] = Field(
        default_factory=list,
        description="Complete replacement set; an empty list clears every association.",
    )


__all__ = ["MenuIdsOut", "MenuIdsUpdate", "MenuNodeOut", "MenuTreeResponse"]
