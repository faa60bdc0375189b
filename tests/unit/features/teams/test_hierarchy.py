from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from console_api.features.teams.hierarchy import TeamHierarchy


def _ids(count: int) -> list[UUID]:
    return [uuid4() for _ in range(count)]


@pytest.fixture()
def chain() -> tuple[TeamHierarchy, list[UUID]]:
    """root -> child -> grandchild -> great-grandchild, plus a sibling of child."""

    root, child, grandchild, great, sibling = _ids(5)
    hierarchy = TeamHierarchy.from_edges(
        [
            (root, None),
            (child, root),
            (grandchild, child),
            (great, grandchild),
            (sibling, root),
        ]
    )
    return hierarchy, [root, child, grandchild, great, sibling]


def test_ancestors_are_listed_nearest_first(chain) -> None:
    hierarchy, (root, child, grandchild, great, _) = chain

    assert hierarchy.ancestors_of(great) == [grandchild, child, root]
    assert hierarchy.ancestors_of(root) == []


def test_is_ancestor_follows_the_full_chain(chain) -> None:
    hierarchy, (root, child, grandchild, great, sibling) = chain

    assert hierarchy.is_ancestor(root, great)
    assert hierarchy.is_ancestor(child, grandchild)
    assert not hierarchy.is_ancestor(great, root)
    assert not hierarchy.is_ancestor(sibling, great)
    assert not hierarchy.is_ancestor(great, great)


def test_unknown_parent_is_treated_as_a_root() -> None:
    team, missing_parent = _ids(2)
    hierarchy = TeamHierarchy({team: missing_parent})

    assert hierarchy.parent_of(team) is None
    assert hierarchy.ancestors_of(team) == []
    assert not hierarchy.is_ancestor(missing_parent, team)


def test_descendants_expand_breadth_first_and_exclude_seeds(chain) -> None:
    hierarchy, (root, child, grandchild, great, sibling) = chain

    assert hierarchy.descendants_of([child]) == {grandchild, great}
    assert hierarchy.descendants_of([root]) == {child, grandchild, great, sibling}
    assert hierarchy.descendants_of([great]) == set()
    assert hierarchy.descendants_of([]) == set()


def test_descendants_include_a_seed_nested_under_another_seed(chain) -> None:
    hierarchy, (root, child, grandchild, great, sibling) = chain

    assert hierarchy.descendants_of([root, grandchild]) == {child, grandchild, great, sibling}


def test_walks_terminate_on_cyclic_data() -> None:
    first, second, third, outsider = _ids(4)
    hierarchy = TeamHierarchy({first: second, second: third, third: first, outsider: None})

    assert hierarchy.ancestors_of(first) == [second, third]
    assert not hierarchy.is_ancestor(outsider, first)
    assert hierarchy.descendants_of([first]) == {first, second, third}


def test_would_create_cycle(chain) -> None:
    hierarchy, (root, child, grandchild, great, sibling) = chain

    assert hierarchy.would_create_cycle(child, child)
    assert hierarchy.would_create_cycle(child, great)
    assert hierarchy.would_create_cycle(root, grandchild)
    assert not hierarchy.would_create_cycle(great, sibling)
    assert not hierarchy.would_create_cycle(sibling, grandchild)
    assert not hierarchy.would_create_cycle(child, None)


def test_children_and_membership(chain) -> None:
    hierarchy, (root, child, _, _, sibling) = chain

    assert set(hierarchy.children_of(root)) == {child, sibling}
    assert hierarchy.children_of(sibling) == []
    assert root in hierarchy
    assert uuid4() not in hierarchy
