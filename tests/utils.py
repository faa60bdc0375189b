"""Helper functions shared across tests."""

from __future__ import annotations

from typing import Any

from httpx import AsyncClient

from console_api.settings import Settings

TEST_SECRET_KEY = "test-secret-key-for-tests-please-change"


def build_test_settings(database_url: str = "sqlite://", **overrides: Any) -> Settings:
    """Return settings isolated from ``.env`` files and ambient ``CONSOLE_*`` variables."""

    values: dict[str, Any] = {
        "secret_key": TEST_SECRET_KEY,
        "database_url": database_url,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def login(
    client: AsyncClient,
    *,
    email: str,
    password: str,
) -> tuple[str, dict[str, Any]]:
    """Authenticate with a password, returning ``(access_token, payload)``."""

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    payload = response.json()
    token = payload["accessToken"]
    assert token
    return token, payload


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def login_headers(client: AsyncClient, *, email: str, password: str) -> dict[str, str]:
    token, _ = await login(client, email=email, password=password)
    return auth_headers(token)
