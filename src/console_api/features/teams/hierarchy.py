"""Ancestor and descendant queries over the team parent-pointer forest.

The index is built from a snapshot of ``(id, parent_id)`` pairs and never
touches the database itself. Every walk keeps a visited set, so a corrupted
parent chain terminates instead of looping.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from console_db.models import Team


class TeamHierarchy:
    """In-memory index of the team forest."""

    def __init__(self, parents: Mapping[UUID, UUID | None]) -> None:
        self._parents: dict[UUID, UUID | None] = dict(parents)
        self._children: dict[UUID, list[UUID]] = defaultdict(list)
        for team_id, parent_id in self._parents.items():
            if parent_id is not None:
                self._children[parent_id].append(team_id)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[UUID, UUID | None]]) -> TeamHierarchy:
        return cls(dict(edges))

    @classmethod
    def load(cls, session: Session) -> TeamHierarchy:
        """Snapshot every team edge from the database."""

        rows = session.execute(select(Team.id, Team.parent_id)).all()
        return cls.from_edges((row.id, row.parent_id) for row in rows)

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._parents

    def parent_of(self, team_id: UUID) -> UUID | None:
        """Return the parent id, or ``None`` for roots and dangling references."""

        parent_id = self._parents.get(team_id)
        if parent_id is None or parent_id not in self._parents:
            return None
        return parent_id

    def children_of(self, team_id: UUID) -> list[UUID]:
        return list(self._children.get(team_id, ()))

    def ancestors_of(self, team_id: UUID) -> list[UUID]:
        """Return ancestor ids nearest first, stopping at a root."""

        ancestors: list[UUID] = []
        visited = {team_id}
        current = self.parent_of(team_id)
        while current is not None and current not in visited:
            ancestors.append(current)
            visited.add(current)
            current = self.parent_of(current)
        return ancestors

    def is_ancestor(self, candidate_ancestor_id: UUID, team_id: UUID) -> bool:
        """Return ``True`` when ``candidate_ancestor_id`` sits above ``team_id``."""

        return candidate_ancestor_id in self.ancestors_of(team_id)

    def descendants_of(self, team_ids: Iterable[UUID]) -> set[UUID]:
        """Breadth-first expansion of every sub-team below ``team_ids``.

        The seeds themselves are only part of the result when one of them is
        also below another seed.
        """

        seeds = set(team_ids)
        result: set[UUID] = set()
        frontier = deque(seeds)
        while frontier:
            current = frontier.popleft()
            for child_id in self._children.get(current, ()):
                if child_id in result:
                    continue
                result.add(child_id)
                frontier.append(child_id)
        return result

    def would_create_cycle(self, team_id: UUID, new_parent_id: UUID | None) -> bool:
        """Return ``True`` when re-parenting ``team_id`` under ``new_parent_id`` loops."""

        if new_parent_id is None:
            return False
        if new_parent_id == team_id:
            return True
        return team_id in self.ancestors_of(new_parent_id)


__all__ = ["TeamHierarchy"]
