"""
User directory tests.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import UserHandle

pytestmark = pytest.mark.asyncio


class TestUserSearch:
    async def test_partial_case_insensitive_and_excludes_caller(
        self,
        client: AsyncClient,
        alice: UserHandle,
        bob: UserHandle,
        carol: UserHandle,
    ) -> None:
        response = await client.get("/api/users/search?email=EXAMPLE", headers=alice.headers)
        assert response.status_code == 200
        ids = {p["id"] for p in response.json()["data"]}
        assert ids == {bob.id, carol.id}

    async def test_public_fields_only(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle
    ) -> None:
        response = await client.get(
            f"/api/users/search?email={bob.user.email[:3]}", headers=alice.headers
        )
        match = response.json()["data"][0]
        assert set(match) == {"id", "email", "full_name", "avatar_url"}

    async def test_at_most_ten_results(self, client: AsyncClient, alice: UserHandle, make_user) -> None:
        for i in range(12):
            await make_user(email=f"crowd{i:02d}@example.com", full_name=f"Crowd {i}")

        response = await client.get("/api/users/search?email=crowd", headers=alice.headers)
        assert len(response.json()["data"]) == 10

    async def test_blank_query_rejected(self, client: AsyncClient, alice: UserHandle) -> None:
        response = await client.get("/api/users/search?email=%20%20", headers=alice.headers)
        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get("/api/users/search?email=a")
        assert response.status_code == 401


class TestPublicProfile:
    async def test_get_by_id(self, client: AsyncClient, alice: UserHandle, bob: UserHandle) -> None:
        response = await client.get(f"/api/users/{bob.id}", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["data"]["full_name"] == "Bob Member"

    async def test_unknown_id(self, client: AsyncClient, alice: UserHandle) -> None:
        response = await client.get(
            "/api/users/00000000-0000-0000-0000-000000000000", headers=alice.headers
        )
        assert response.status_code == 404
