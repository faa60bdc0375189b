from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from console_api.core.errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    ValidationFailedError,
)
from console_api.core.security import verify_password
from console_api.features.users.schemas import UserCreate, UserUpdate
from console_api.features.users.service import UsersService
from console_api.settings import Settings
from console_db.models import SystemRole, User, UserStatus
from tests.integration.conftest import SeededIdentity


def test_create_user_grants_the_user_role(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)

    created = service.create_user(
        UserCreate(email="New.Person@Example.com", password="new_pass", display_name="  "),
        operator_id=seeded_identity.admin.id,
    )

    assert created.system_roles == [SystemRole.USER]
    assert created.status is UserStatus.ACTIVE
    assert created.display_name is None
    assert service.find_by_email("new.person@example.com") is not None

    with pytest.raises(ConflictError):
        service.create_user(UserCreate(email="NEW.PERSON@example.com", password="other_pass"))


def test_create_user_enforces_password_policy(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    strict = settings.model_copy(update={"auth_password_require_number": True})
    service = UsersService(session=db_session, settings=strict)

    with pytest.raises(ValidationFailedError) as excinfo:
        service.create_user(UserCreate(email="weak@example.com", password="letters"))

    assert excinfo.value.errors
    assert service.find_by_email("weak@example.com") is None


def test_stats_count_active_and_inactive(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)
    service.update_user(
        user_id=seeded_identity.outsider.id,
        payload=UserUpdate(status=UserStatus.INACTIVE),
    )

    stats = service.stats()

    assert (stats.total, stats.active, stats.inactive) == (4, 3, 1)


def test_update_user_fields(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)

    updated = service.update_user(
        user_id=seeded_identity.member.id,
        payload=UserUpdate(display_name="Renamed", password="changed_pass"),
    )

    assert updated.display_name == "Renamed"
    user = db_session.get(User, seeded_identity.member.id)
    assert user is not None
    assert verify_password("changed_pass", user.hashed_password)

    with pytest.raises(ConflictError):
        service.update_user(
            user_id=seeded_identity.member.id,
            payload=UserUpdate(email=seeded_identity.admin.email),
        )
    with pytest.raises(NotFoundError):
        service.update_user(user_id=uuid4(), payload=UserUpdate(display_name="Ghost"))


def test_system_roles_can_be_granted_and_revoked(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)
    user_id = seeded_identity.member.id

    granted = service.grant_system_role(user_id=user_id, role=SystemRole.ADMIN)
    again = service.grant_system_role(user_id=user_id, role=SystemRole.ADMIN)
    assert granted.system_roles == [SystemRole.ADMIN, SystemRole.USER]
    assert again.system_roles == granted.system_roles

    revoked = service.revoke_system_role(user_id=user_id, role=SystemRole.ADMIN)
    assert revoked.system_roles == [SystemRole.USER]


def test_last_admin_is_protected(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)
    admin_id = seeded_identity.admin.id

    with pytest.raises(InvariantViolationError):
        service.revoke_system_role(user_id=admin_id, role=SystemRole.ADMIN)
    with pytest.raises(InvariantViolationError):
        service.delete_user(user_id=admin_id)
    for status in (UserStatus.INACTIVE, UserStatus.SUSPENDED):
        with pytest.raises(InvariantViolationError):
            service.update_user(user_id=admin_id, payload=UserUpdate(status=status))

    backup_id = seeded_identity.member.id
    service.grant_system_role(user_id=backup_id, role=SystemRole.ADMIN)
    service.update_user(user_id=backup_id, payload=UserUpdate(status=UserStatus.INACTIVE))
    with pytest.raises(InvariantViolationError):
        service.delete_user(user_id=admin_id)

    service.update_user(user_id=backup_id, payload=UserUpdate(status=UserStatus.ACTIVE))
    deactivated = service.update_user(
        user_id=admin_id, payload=UserUpdate(status=UserStatus.INACTIVE)
    )
    assert deactivated.status is UserStatus.INACTIVE
    service.delete_user(user_id=admin_id)

    assert db_session.get(User, admin_id) is None


def test_delete_user(
    db_session: Session,
    seeded_identity: SeededIdentity,
    settings: Settings,
) -> None:
    service = UsersService(session=db_session, settings=settings)

    service.delete_user(user_id=seeded_identity.outsider.id)

    assert service.find_by_email(seeded_identity.outsider.email) is None
    with pytest.raises(NotFoundError):
        service.get_user(user_id=seeded_identity.outsider.id)
