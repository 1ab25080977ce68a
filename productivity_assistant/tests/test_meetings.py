"""
Meeting endpoint tests.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import UserHandle, create_team

pytestmark = pytest.mark.asyncio


async def _schedule(client: AsyncClient, user: UserHandle, team_id: str, **fields):
    payload = {
        "team_id": team_id,
        "title": "Standup",
        "scheduled_at": "2030-01-01T09:00:00Z",
        **fields,
    }
    return await client.post("/api/meetings", json=payload, headers=user.headers)


class TestMeetings:
    async def test_leader_schedules_and_members_are_notified(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        response = await _schedule(client, alice, team["id"], location="Room 4")
        assert response.status_code == 201
        meeting = response.json()["data"]
        assert meeting["duration_minutes"] == 60
        assert meeting["created_by"] == alice.id

        bob_notes = (await client.get("/api/notifications", headers=bob.headers)).json()["data"]
        scheduled = [n for n in bob_notes if n["type"] == "meeting_scheduled"]
        assert len(scheduled) == 1
        assert scheduled[0]["data"]["meeting_id"] == meeting["id"]

        alice_notes = (await client.get("/api/notifications", headers=alice.headers)).json()["data"]
        assert all(n["type"] != "meeting_scheduled" for n in alice_notes)

    async def test_member_cannot_schedule(
        self, client: AsyncClient, bob: UserHandle, team: dict
    ) -> None:
        response = await _schedule(client, bob, team["id"])
        assert response.status_code == 403

    async def test_member_reads_outsider_cannot(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, carol: UserHandle, team: dict
    ) -> None:
        meeting = (await _schedule(client, alice, team["id"])).json()["data"]
        url = f"/api/meetings/{meeting['id']}"

        assert (await client.get(url, headers=bob.headers)).status_code == 200
        assert (await client.get(url, headers=carol.headers)).status_code == 403

    async def test_list_across_my_teams_sorted(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle, team: dict
    ) -> None:
        other = await create_team(client, alice, name="Second")
        await _schedule(client, alice, team["id"], title="Later", scheduled_at="2030-03-01T09:00:00Z")
        await _schedule(client, alice, other["id"], title="Sooner", scheduled_at="2030-02-01T09:00:00Z")
        foreign = await create_team(client, carol, name="Elsewhere")
        await _schedule(client, carol, foreign["id"], title="Not mine")

        response = await client.get("/api/meetings", headers=alice.headers)
        body = response.json()
        assert [m["title"] for m in body["data"]] == ["Sooner", "Later"]
        assert body["pagination"]["total"] == 2

        filtered = await client.get(f"/api/meetings?team_id={other['id']}", headers=alice.headers)
        assert [m["title"] for m in filtered.json()["data"]] == ["Sooner"]

    async def test_list_without_teams_is_empty(
        self, client: AsyncClient, carol: UserHandle
    ) -> None:
        response = await client.get("/api/meetings", headers=carol.headers)
        assert response.status_code == 200
        assert response.json()["data"] == []
        assert response.json()["pagination"]["total"] == 0

    async def test_update_and_delete_leader_only(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        meeting = (await _schedule(client, alice, team["id"])).json()["data"]
        url = f"/api/meetings/{meeting['id']}"

        assert (
            await client.patch(url, json={"title": "Moved"}, headers=bob.headers)
        ).status_code == 403
        assert (await client.delete(url, headers=bob.headers)).status_code == 403

        updated = await client.patch(
            url, json={"title": "Moved", "duration_minutes": 30}, headers=alice.headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["duration_minutes"] == 30

        assert (await client.delete(url, headers=alice.headers)).status_code == 200
        assert (await client.get(url, headers=alice.headers)).status_code == 404

    async def test_unknown_team(self, client: AsyncClient, alice: UserHandle) -> None:
        response = await _schedule(client, alice, "00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
