from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from console_api.core.security import hash_password
from console_api.features.bootstrap.service import BootstrapService
from console_api.features.teams.service import DEFAULT_TEAM_ROLES
from console_api.main import create_app
from console_api.settings import Settings, get_settings
from console_db.engine import build_engine
from console_db.migrations_runner import run_migrations
from console_db.models import (
    ROOT_TEAM_ID,
    Menu,
    SystemRole,
    SystemRoleMenu,
    Team,
    TeamMember,
    TeamRole,
    User,
    UserStatus,
    UserSystemRole,
)
from tests.utils import build_test_settings

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin_pass"


@dataclass(frozen=True, slots=True)
class SeededUser:
    id: UUID
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SeededTeam:
    id: UUID
    admin_role_id: UUID
    developer_role_id: UUID


@dataclass(frozen=True, slots=True)
class SeededIdentity:
    """Admin console fixture data.

    ``team_a`` is a top-level team, ``team_b`` its child and ``team_c`` the
    grandchild. ``team_admin`` administers ``team_a`` only; ``member`` is a
    developer in ``team_b``; ``outsider`` belongs to no team.
    """

    root_team_id: UUID
    team_a: SeededTeam
    team_b: SeededTeam
    team_c: SeededTeam
    admin: SeededUser
    team_admin: SeededUser
    member: SeededUser
    outsider: SeededUser
    menus: dict[str, UUID]

    @property
    def user(self) -> SeededUser:
        return self.member


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    database_url = f"sqlite:///{tmp_path / 'console.sqlite'}"
    return build_test_settings(
        database_url,
        bootstrap_admin_email=ADMIN_EMAIL,
        bootstrap_admin_name="Console Admin",
    )


@pytest.fixture()
def migrated_db(settings: Settings) -> Iterator[Engine]:
    run_migrations(settings)
    engine = build_engine(settings)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_sessionmaker(migrated_db: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=migrated_db, expire_on_commit=False)


@pytest.fixture()
def db_session(db_sessionmaker: sessionmaker[Session]) -> Iterator[Session]:
    session = db_sessionmaker()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def app(settings: Settings, migrated_db: Engine) -> FastAPI:
    app = create_app(settings=settings)
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest_asyncio.fixture()
async def async_client(
    app: FastAPI,
    db_sessionmaker: sessionmaker[Session],
    migrated_db: Engine,
) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        app.state.db_engine.dispose()
        app.state.db_engine = migrated_db
        app.state.db_sessionmaker = db_sessionmaker
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            yield client


def create_user(
    session: Session,
    email: str,
    password: str,
    *,
    roles: tuple[SystemRole, ...] = (SystemRole.USER,),
    status: UserStatus = UserStatus.ACTIVE,
) -> SeededUser:
    user = User(
        email=email,
        display_name=email.split("@", 1)[0].title(),
        hashed_password=hash_password(password),
        status=status,
    )
    for role in roles:
        user.system_roles.append(UserSystemRole(role=role))
    session.add(user)
    session.flush()
    return SeededUser(id=user.id, email=email, password=password)


def create_team(session: Session, name: str, *, parent_id: UUID | None) -> SeededTeam:
    team = Team(name=name, parent_id=parent_id)
    session.add(team)
    session.flush()
    roles: dict[str, TeamRole] = {}
    for role_name, code, is_admin in DEFAULT_TEAM_ROLES:
        role = TeamRole(team_id=team.id, name=role_name, code=code, is_admin=is_admin)
        session.add(role)
        roles[code] = role
    session.flush()
    return SeededTeam(
        id=team.id,
        admin_role_id=roles["admin"].id,
        developer_role_id=roles["developer"].id,
    )


def add_membership(session: Session, *, user_id: UUID, team_id: UUID, role_id: UUID) -> None:
    session.add(TeamMember(user_id=user_id, team_id=team_id, team_role_id=role_id))
    session.flush()


@pytest.fixture()
def seeded_identity(db_session: Session, settings: Settings) -> SeededIdentity:
    bootstrap = BootstrapService(session=db_session, settings=settings)
    result = bootstrap.run(admin_password=ADMIN_PASSWORD)
    admin = SeededUser(id=result.admin_user_id, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)

    team_admin = create_user(db_session, "lead@example.com", "lead_pass")
    member = create_user(db_session, "member@example.com", "member_pass")
    outsider = create_user(db_session, "outsider@example.com", "outsider_pass")

    team_a = create_team(db_session, "Team A", parent_id=None)
    team_b = create_team(db_session, "Team B", parent_id=team_a.id)
    team_c = create_team(db_session, "Team C", parent_id=team_b.id)

    add_membership(
        db_session,
        user_id=team_admin.id,
        team_id=team_a.id,
        role_id=team_a.admin_role_id,
    )
    add_membership(
        db_session,
        user_id=member.id,
        team_id=team_b.id,
        role_id=team_b.developer_role_id,
    )

    menus = {menu.path: menu.id for menu in db_session.execute(select(Menu)).scalars()}
    db_session.add(SystemRoleMenu(role=SystemRole.USER, menu_id=menus["/admin/users"]))
    db_session.commit()

    return SeededIdentity(
        root_team_id=ROOT_TEAM_ID,
        team_a=team_a,
        team_b=team_b,
        team_c=team_c,
        admin=admin,
        team_admin=team_admin,
        member=member,
        outsider=outsider,
        menus=menus,
    )
