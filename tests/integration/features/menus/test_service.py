from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from console_api.core.auth.errors import PermissionDeniedError
from console_api.core.errors import NotFoundError
from console_api.features.menus.service import MenusService
from console_api.settings import Settings
from console_db.models import SystemRole, SystemRoleMenu, TeamRoleMenu
from tests.integration.conftest import SeededIdentity


def _menus(seeded: SeededIdentity, *paths: str) -> frozenset[UUID]:
    return frozenset(seeded.menus[path] for path in paths)


def _role_rows(session: Session, role_id: UUID) -> list[tuple[UUID, UUID]]:
    rows = session.execute(
        select(TeamRoleMenu.team_role_id, TeamRoleMenu.menu_id).where(
            TeamRoleMenu.team_role_id == role_id
        )
    ).all()
    return sorted((row.team_role_id, row.menu_id) for row in rows)


def test_system_admin_sees_everything(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)

    visible = service.visible_menu_ids(
        user_id=seeded_identity.admin.id,
        team_id=seeded_identity.team_b.id,
    )

    assert visible == frozenset(seeded_identity.menus.values())


def test_user_without_team_sees_fallback_with_ancestor(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)

    visible = service.visible_menu_ids(user_id=seeded_identity.outsider.id)
    tree = service.visible_tree(user_id=seeded_identity.outsider.id)

    assert visible == _menus(seeded_identity, "/admin", "/admin/users")
    assert [node.path for node in tree.items] == ["/admin"]
    assert [node.path for node in tree.items[0].children] == ["/admin/users"]


def test_role_menus_replace_fallback_in_team_context(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)
    member_id = seeded_identity.member.id
    team_b = seeded_identity.team_b

    assert service.visible_menu_ids(user_id=member_id, team_id=team_b.id) == _menus(
        seeded_identity, "/admin", "/admin/users"
    )

    service.replace_role_menus(
        role_id=team_b.developer_role_id,
        menu_ids=[seeded_identity.menus["/admin/teams"]],
        operator_id=seeded_identity.team_admin.id,
    )

    assert service.visible_menu_ids(user_id=member_id, team_id=team_b.id) == _menus(
        seeded_identity, "/admin", "/admin/teams"
    )
    assert service.visible_menu_ids(
        user_id=member_id, team_id=seeded_identity.team_a.id
    ) == _menus(seeded_identity, "/admin", "/admin/users")


def test_union_mode_keeps_fallback(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    union_settings = settings.model_copy(update={"menu_visibility_mode": "union"})
    service = MenusService(session=db_session, settings=union_settings)
    team_b = seeded_identity.team_b
    service.write_role_menus(
        role_id=team_b.developer_role_id,
        menu_ids=[seeded_identity.menus["/admin/teams"]],
    )

    visible = service.visible_menu_ids(user_id=seeded_identity.member.id, team_id=team_b.id)

    assert visible == _menus(seeded_identity, "/admin", "/admin/users", "/admin/teams")


def test_replacing_role_menus_twice_is_idempotent(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)
    role_id = seeded_identity.team_b.developer_role_id
    menu_ids = [
        seeded_identity.menus["/admin/teams"],
        seeded_identity.menus["/admin/users"],
        seeded_identity.menus["/admin/teams"],
    ]

    first = service.replace_role_menus(
        role_id=role_id, menu_ids=menu_ids, operator_id=seeded_identity.admin.id
    )
    first_rows = _role_rows(db_session, role_id)
    second = service.replace_role_menus(
        role_id=role_id, menu_ids=menu_ids, operator_id=seeded_identity.admin.id
    )

    assert first == second
    assert len(first_rows) == 2
    assert _role_rows(db_session, role_id) == first_rows
    assert set(service.get_role_menus(role_id=role_id).menu_ids) == set(menu_ids)


def test_replace_role_menus_requires_team_authority(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)

    with pytest.raises(PermissionDeniedError):
        service.replace_role_menus(
            role_id=seeded_identity.team_b.developer_role_id,
            menu_ids=[seeded_identity.menus["/admin/teams"]],
            operator_id=seeded_identity.member.id,
        )


def test_unknown_menu_leaves_existing_rows_untouched(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)
    role_id = seeded_identity.team_b.developer_role_id
    service.write_role_menus(role_id=role_id, menu_ids=[seeded_identity.menus["/admin/users"]])
    before = _role_rows(db_session, role_id)

    with pytest.raises(NotFoundError):
        service.replace_role_menus(
            role_id=role_id,
            menu_ids=[seeded_identity.menus["/admin/teams"], uuid4()],
            operator_id=seeded_identity.admin.id,
        )
    with pytest.raises(NotFoundError):
        service.get_role_menus(role_id=uuid4())

    assert _role_rows(db_session, role_id) == before


def test_fallback_can_be_replaced_and_cleared(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)
    teams_id = seeded_identity.menus["/admin/teams"]

    replaced = service.replace_fallback([teams_id, teams_id], operator_id=seeded_identity.admin.id)
    assert replaced.menu_ids == [teams_id]
    assert service.get_fallback().menu_ids == [teams_id]

    cleared = service.replace_fallback([], operator_id=seeded_identity.admin.id)
    assert cleared.menu_ids == []
    remaining = db_session.execute(
        select(SystemRoleMenu.id).where(SystemRoleMenu.role == SystemRole.USER)
    ).all()
    assert remaining == []
    assert service.visible_menu_ids(user_id=seeded_identity.outsider.id) == frozenset()


def test_full_tree_lists_every_menu_in_order(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    tree = MenusService(session=db_session, settings=settings).list_tree()

    assert [node.path for node in tree.items] == ["/admin"]
    assert [node.path for node in tree.items[0].children] == [
        "/admin/users",
        "/admin/teams",
        "/admin/menus",
    ]


def test_role_menus_are_readable_by_members_and_administrators(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = MenusService(session=db_session, settings=settings)
    role_id = seeded_identity.team_b.developer_role_id

    with pytest.raises(PermissionDeniedError):
        service.get_role_menus(role_id=role_id, viewer_id=seeded_identity.outsider.id)

    for viewer in (seeded_identity.member, seeded_identity.team_admin, seeded_identity.admin):
        assert service.get_role_menus(role_id=role_id, viewer_id=viewer.id).menu_ids == []
