from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from console_api.features.bootstrap.service import DEFAULT_MENUS, ROOT_TEAM_NAME, BootstrapService
from console_api.settings import Settings
from console_db.models import ROOT_TEAM_ID, Menu, SystemRole, Team, TeamMember, TeamRole, User
from tests.utils import build_test_settings


def _count(session: Session, model: type) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_bootstrap_seeds_once(db_session: Session, settings: Settings) -> None:
    service = BootstrapService(session=db_session, settings=settings)

    first = service.run(admin_password="admin_pass")
    second = service.run(admin_password="another_pass")

    assert "admin_user" in first.created
    assert "root_team" in first.created
    assert "root_membership" in first.created
    assert second.created == []
    assert second.admin_user_id == first.admin_user_id

    assert _count(db_session, Menu) == len(DEFAULT_MENUS)
    assert _count(db_session, User) == 1
    assert _count(db_session, TeamMember) == 1

    admin = db_session.get(User, first.admin_user_id)
    assert admin is not None
    assert admin.role_values == {SystemRole.ADMIN, SystemRole.USER}
    team = db_session.get(Team, ROOT_TEAM_ID)
    assert team is not None and team.name == ROOT_TEAM_NAME
    role = db_session.execute(
        select(TeamRole).where(TeamRole.team_id == ROOT_TEAM_ID)
    ).scalar_one()
    assert (role.code, role.is_admin) == ("admin", True)


def test_bootstrap_uses_configured_password(
    db_session: Session,
    settings: Settings,
) -> None:
    configured = build_test_settings(
        database_url=settings.database_url,
        bootstrap_admin_email=settings.bootstrap_admin_email,
        bootstrap_admin_password="from_settings",
    )

    result = BootstrapService(session=db_session, settings=configured).run()

    assert db_session.get(User, result.admin_user_id) is not None


def test_bootstrap_requires_a_password(
    db_session: Session,
    settings: Settings,
) -> None:
    with pytest.raises(ValueError, match="password is required"):
        BootstrapService(session=db_session, settings=settings).run()

    assert _count(db_session, User) == 0
