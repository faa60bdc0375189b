from __future__ import annotations

from typing import Any
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.integration.conftest import SeededIdentity
from tests.utils import login_headers

pytestmark = pytest.mark.asyncio


def _paths(items: list[dict[str, Any]]) -> list[tuple[str, list[str]]]:
    return [(item["path"], [child["path"] for child in item["children"]]) for item in items]


async def test_user_without_team_gets_fallback_tree(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    outsider = seeded_identity.outsider
    headers = await login_headers(async_client, email=outsider.email, password=outsider.password)

    response = await async_client.get("/api/v1/me/menus", headers=headers)

    assert response.status_code == 200, response.text
    items = response.json()["items"]
    assert _paths(items) == [("/admin", ["/admin/users"])]
    assert items[0]["sortOrder"] == 1
    assert items[0]["children"][0]["parentId"] == items[0]["id"]


async def test_team_role_menus_replace_fallback_for_that_team(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    lead = seeded_identity.team_admin
    member = seeded_identity.member
    team_b = seeded_identity.team_b
    lead_headers = await login_headers(async_client, email=lead.email, password=lead.password)
    member_headers = await login_headers(
        async_client, email=member.email, password=member.password
    )
    teams_menu = str(seeded_identity.menus["/admin/teams"])

    replaced = await async_client.put(
        f"/api/v1/roles/{team_b.developer_role_id}/menus",
        json={"menuIds": [teams_menu, teams_menu]},
        headers=lead_headers,
    )
    assert replaced.status_code == 200, replaced.text
    assert replaced.json() == {"menuIds": [teams_menu]}

    in_team = await async_client.get(
        "/api/v1/me/menus",
        params={"teamId": str(team_b.id)},
        headers=member_headers,
    )
    assert in_team.status_code == 200, in_team.text
    assert _paths(in_team.json()["items"]) == [("/admin", ["/admin/teams"])]

    no_team = await async_client.get("/api/v1/me/menus", headers=member_headers)
    assert _paths(no_team.json()["items"]) == [("/admin", ["/admin/users"])]

    denied = await async_client.put(
        f"/api/v1/roles/{team_b.developer_role_id}/menus",
        json={"menuIds": []},
        headers=member_headers,
    )
    assert denied.status_code == 403, denied.text


async def test_unknown_menu_id_is_not_found(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    admin = seeded_identity.admin
    headers = await login_headers(async_client, email=admin.email, password=admin.password)

    response = await async_client.put(
        f"/api/v1/roles/{seeded_identity.team_b.developer_role_id}/menus",
        json={"menuIds": [str(uuid4())]},
        headers=headers,
    )

    assert response.status_code == 404, response.text
    assert response.json()["type"] == "not_found"


async def test_fallback_is_admin_managed(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    admin = seeded_identity.admin
    outsider = seeded_identity.outsider
    admin_headers = await login_headers(async_client, email=admin.email, password=admin.password)
    outsider_headers = await login_headers(
        async_client, email=outsider.email, password=outsider.password
    )
    menus_menu = str(seeded_identity.menus["/admin/menus"])

    forbidden = await async_client.get("/api/v1/menus/fallback", headers=outsider_headers)
    assert forbidden.status_code == 403, forbidden.text

    updated = await async_client.put(
        "/api/v1/menus/fallback",
        json={"menuIds": [menus_menu]},
        headers=admin_headers,
    )
    assert updated.status_code == 200, updated.text

    current = await async_client.get("/api/v1/menus/fallback", headers=admin_headers)
    assert current.json() == {"menuIds": [menus_menu]}

    tree = await async_client.get("/api/v1/me/menus", headers=outsider_headers)
    assert _paths(tree.json()["items"]) == [("/admin", ["/admin/menus"])]


async def test_admin_sees_full_menu_tree(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    admin = seeded_identity.admin
    headers = await login_headers(async_client, email=admin.email, password=admin.password)

    mine = await async_client.get("/api/v1/me/menus", headers=headers)
    full = await async_client.get("/api/v1/menus", headers=headers)

    expected = [("/admin", ["/admin/users", "/admin/teams", "/admin/menus"])]
    assert _paths(mine.json()["items"]) == expected
    assert _paths(full.json()["items"]) == expected


async def test_role_menus_are_hidden_from_non_members(
    async_client: AsyncClient,
    seeded_identity: SeededIdentity,
) -> None:
    outsider = seeded_identity.outsider
    member = seeded_identity.member
    url = f"/api/v1/roles/{seeded_identity.team_b.developer_role_id}/menus"

    outsider_headers = await login_headers(
        async_client, email=outsider.email, password=outsider.password
    )
    forbidden = await async_client.get(url, headers=outsider_headers)
    assert forbidden.status_code == 403, forbidden.text
    assert forbidden.json()["type"] == "forbidden"

    member_headers = await login_headers(async_client, email=member.email, password=member.password)
    allowed = await async_client.get(url, headers=member_headers)
    assert allowed.status_code == 200, allowed.text
    assert allowed.json() == {"menuIds": []}
