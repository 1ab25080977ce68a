"""
Comment endpoint tests.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import UserHandle, create_task

pytestmark = pytest.mark.asyncio


async def _comment(client: AsyncClient, task_id: str, user: UserHandle, content: str):
    return await client.post(
        f"/api/tasks/{task_id}/comments", json={"content": content}, headers=user.headers
    )


class TestComments:
    async def test_member_comments_and_owner_is_notified(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Discuss", team_id=team["id"])

        response = await _comment(client, task["id"], bob, "  Looks good  ")
        assert response.status_code == 201
        comment = response.json()["data"]
        assert comment["content"] == "Looks good"
        assert comment["author"]["full_name"] == "Bob Member"

        notifications = (await client.get("/api/notifications", headers=alice.headers)).json()["data"]
        assert [n["type"] for n in notifications] == ["task_comment"]

    async def test_own_comment_does_not_notify(
        self, client: AsyncClient, alice: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        await _comment(client, task["id"], alice, "note to self")

        count = await client.get("/api/notifications/unread-count", headers=alice.headers)
        assert count.json()["data"]["count"] == 0

    async def test_list_in_creation_order(
        self, client: AsyncClient, alice: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        for text in ("first", "second", "third"):
            await _comment(client, task["id"], alice, text)

        response = await client.get(f"/api/tasks/{task['id']}/comments", headers=alice.headers)
        assert [c["content"] for c in response.json()["data"]] == ["first", "second", "third"]

    async def test_blank_comment_rejected(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice)
        response = await _comment(client, task["id"], alice, "   ")
        assert response.status_code == 400

    async def test_outsider_cannot_comment_on_personal_task(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        response = await _comment(client, task["id"], carol, "hello")
        assert response.status_code == 403

        listing = await client.get(f"/api/tasks/{task['id']}/comments", headers=carol.headers)
        assert listing.status_code == 403

    async def test_only_author_edits_and_deletes(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, team_id=team["id"])
        comment = (await _comment(client, task["id"], bob, "draft")).json()["data"]
        url = f"/api/comments/{comment['id']}"

        # Even the team leader cannot edit someone else's comment
        forbidden = await client.patch(url, json={"content": "edited"}, headers=alice.headers)
        assert forbidden.status_code == 403
        assert (await client.delete(url, headers=alice.headers)).status_code == 403

        edited = await client.patch(url, json={"content": "edited"}, headers=bob.headers)
        assert edited.status_code == 200
        assert edited.json()["data"]["content"] == "edited"

        deleted = await client.delete(url, headers=bob.headers)
        assert deleted.status_code == 200
        remaining = await client.get(f"/api/tasks/{task['id']}/comments", headers=bob.headers)
        assert remaining.json()["data"] == []

    async def test_comments_removed_with_task(
        self, client: AsyncClient, alice: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        comment = (await _comment(client, task["id"], alice, "bye")).json()["data"]

        await client.delete(f"/api/tasks/{task['id']}", headers=alice.headers)
        response = await client.patch(
            f"/api/comments/{comment['id']}", json={"content": "still here?"}, headers=alice.headers
        )
        assert response.status_code == 404
