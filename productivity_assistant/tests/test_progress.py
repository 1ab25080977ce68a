"""
Task progress log tests.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import UserHandle, create_task

pytestmark = pytest.mark.asyncio


async def _add_progress(client: AsyncClient, task_id: str, user: UserHandle, **fields):
    payload = {"status": "working", **fields}
    return await client.post(f"/api/tasks/{task_id}/progress", json=payload, headers=user.headers)


class TestProgress:
    async def test_owner_logs_progress(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice)
        response = await _add_progress(
            client, task["id"], alice, progress_percentage=40, blocker="waiting on review"
        )
        assert response.status_code == 201
        entry = response.json()["data"]
        assert entry["progress_percentage"] == 40
        assert entry["blocker"] == "waiting on review"
        assert entry["author"]["email"] == "alice@example.com"

    async def test_assignee_logs_progress(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, team_id=team["id"], assigned_to=bob.id)
        response = await _add_progress(client, task["id"], bob, progress_percentage=10)
        assert response.status_code == 201

    async def test_unassigned_member_cannot_log_progress(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, team_id=team["id"])
        response = await _add_progress(client, task["id"], bob)
        assert response.status_code == 403

    async def test_percentage_bounds(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice)
        response = await _add_progress(client, task["id"], alice, progress_percentage=101)
        assert response.status_code == 400

    async def test_history_newest_first(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice)
        for pct in (10, 50, 90):
            await _add_progress(client, task["id"], alice, progress_percentage=pct)

        response = await client.get(f"/api/tasks/{task['id']}/progress", headers=alice.headers)
        assert response.status_code == 200
        assert [e["progress_percentage"] for e in response.json()["data"]] == [90, 50, 10]

    async def test_outsider_cannot_read_history(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        response = await client.get(f"/api/tasks/{task['id']}/progress", headers=carol.headers)
        assert response.status_code == 403
