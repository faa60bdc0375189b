"""Authentication endpoint tests."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy.orm import Session

from console_api.settings import Settings, get_settings
from console_db.models import UserStatus
from tests.integration.conftest import SeededIdentity, create_user
from tests.utils import auth_headers, login

pytestmark = pytest.mark.asyncio


async def test_login_returns_bearer_token(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    admin = seeded_identity.admin

    token, payload = await login(async_client, email=admin.email, password=admin.password)

    assert payload["tokenType"] == "bearer"
    assert payload["expiresIn"] > 0
    assert payload["user"]["email"] == admin.email
    assert payload["user"]["systemRoles"] == ["ADMIN", "USER"]

    me = await async_client.get("/api/v1/me", headers=auth_headers(token))
    assert me.status_code == 200, me.text
    assert me.json()["id"] == str(admin.id)
    assert me.json()["lastLoginAt"]


async def test_login_rejects_bad_credentials(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    for email, password in (
        (seeded_identity.admin.email, "wrong-password"),
        ("nobody@example.com", "whatever"),
    ):
        response = await async_client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 401, response.text
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"] == "unauthorized"


async def test_login_rejects_inactive_accounts(
    async_client: AsyncClient,
    db_session: Session,
    seeded_identity: SeededIdentity,
) -> None:
    dormant = create_user(
        db_session,
        "dormant@example.com",
        "dormant_pass",
        status=UserStatus.INACTIVE,
    )
    db_session.commit()

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"email": dormant.email, "password": dormant.password},
    )

    assert response.status_code == 401, response.text
    assert response.json()["detail"] == "User account is inactive."


async def test_register_creates_plain_user(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    response = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "fresh@example.com", "password": "fresh_pass", "displayName": "Fresh"},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["systemRoles"] == ["USER"]
    assert body["status"] == "active"
    assert "hashedPassword" not in body

    duplicate = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "FRESH@example.com", "password": "fresh_pass"},
    )
    assert duplicate.status_code == 409, duplicate.text
    assert duplicate.json()["type"] == "conflict"

    await login(async_client, email="fresh@example.com", password="fresh_pass")


async def test_register_can_be_disabled(
    app: FastAPI,
    async_client: AsyncClient,
    settings: Settings,
    seeded_identity: SeededIdentity,
) -> None:
    closed = settings.model_copy(update={"allow_public_registration": False})
    app.dependency_overrides[get_settings] = lambda: closed

    response = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "late@example.com", "password": "late_pass"},
    )

    assert response.status_code == 403, response.text
    assert response.json()["type"] == "forbidden"


async def test_register_validates_payload(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    response = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "x"},
    )

    assert response.status_code == 422, response.text
    problem = response.json()
    assert problem["type"] == "validation_error"
    assert {error["path"] for error in problem["errors"]} == {"email", "password"}


async def test_protected_routes_require_a_token(async_client: AsyncClient) -> None:
    missing = await async_client.get("/api/v1/me")
    assert missing.status_code == 401, missing.text
    assert missing.headers["WWW-Authenticate"] == "Bearer"

    garbage = await async_client.get("/api/v1/me", headers=auth_headers("not-a-jwt"))
    assert garbage.status_code == 401, garbage.text
    assert garbage.json()["detail"] == "Invalid access token"
