"""
Task endpoint tests.
Covers: personal and team workspaces, the member field-set rule, filters,
ordering, pagination, assignment notifications and statistics.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from conftest import UserHandle, create_task

pytestmark = pytest.mark.asyncio


class TestPersonalTasks:
    async def test_create_defaults(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice, title="  Buy milk  ")
        assert task["title"] == "Buy milk"
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["team_id"] is None
        assert task["user_id"] == alice.id

    async def test_missing_title(self, client: AsyncClient, alice: UserHandle) -> None:
        response = await client.post("/api/tasks", json={"priority": "low"}, headers=alice.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_personal_task_cannot_be_assigned(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle
    ) -> None:
        response = await client.post(
            "/api/tasks",
            json={"title": "Mine", "assigned_to": bob.id},
            headers=alice.headers,
        )
        assert response.status_code == 400

    async def test_only_owner_can_access(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle
    ) -> None:
        task = await create_task(client, alice, title="Private")
        url = f"/api/tasks/{task['id']}"

        assert (await client.get(url, headers=carol.headers)).status_code == 403
        assert (
            await client.put(url, json={"status": "completed"}, headers=carol.headers)
        ).status_code == 403
        assert (await client.delete(url, headers=carol.headers)).status_code == 403

        owner_view = await client.get(url, headers=alice.headers)
        assert owner_view.status_code == 200

    async def test_update_and_delete(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice, title="Update Me")
        url = f"/api/tasks/{task['id']}"

        response = await client.put(
            url, json={"title": "Updated", "priority": "high"}, headers=alice.headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Updated"
        assert response.json()["data"]["priority"] == "high"

        deleted = await client.delete(url, headers=alice.headers)
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert (await client.get(url, headers=alice.headers)).status_code == 404

    async def test_unknown_update_field_rejected(
        self, client: AsyncClient, alice: UserHandle
    ) -> None:
        task = await create_task(client, alice)
        response = await client.put(
            f"/api/tasks/{task['id']}", json={"owner": "someone"}, headers=alice.headers
        )
        assert response.status_code == 400

    async def test_null_title_rejected(self, client: AsyncClient, alice: UserHandle) -> None:
        task = await create_task(client, alice)
        response = await client.put(
            f"/api/tasks/{task['id']}", json={"title": None}, headers=alice.headers
        )
        assert response.status_code == 400

    async def test_not_found(self, client: AsyncClient, alice: UserHandle) -> None:
        fake_id = "00000000-0000-0000-0000-000000000000"
        response = await client.get(f"/api/tasks/{fake_id}", headers=alice.headers)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestListTasks:
    async def test_personal_list_excludes_team_and_foreign_tasks(
        self,
        client: AsyncClient,
        alice: UserHandle,
        bob: UserHandle,
        team: dict,
    ) -> None:
        await create_task(client, alice, title="Alice personal")
        await create_task(client, alice, title="Team work", team_id=team["id"])
        await create_task(client, bob, title="Bob personal")

        response = await client.get("/api/tasks", headers=alice.headers)
        assert response.status_code == 200
        body = response.json()
        assert body["workspace"] == "personal"
        assert [t["title"] for t in body["data"]] == ["Alice personal"]
        assert body["pagination"] == {"total": 1, "limit": 50, "offset": 0, "has_more": False}

    async def test_pagination(self, client: AsyncClient, alice: UserHandle) -> None:
        for i in range(3):
            await create_task(client, alice, title=f"Task {i}")

        response = await client.get("/api/tasks?limit=2&offset=0", headers=alice.headers)
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_more"] is True

        rest = await client.get("/api/tasks?limit=2&offset=2", headers=alice.headers)
        assert len(rest.json()["data"]) == 1
        assert rest.json()["pagination"]["has_more"] is False

    async def test_filters_and_search(self, client: AsyncClient, alice: UserHandle) -> None:
        await create_task(client, alice, title="Write report", status="completed", category="Work")
        await create_task(client, alice, title="Gym", description="Leg day", category="Health")
        await create_task(client, alice, title="Groceries", priority="low")

        by_status = await client.get("/api/tasks?status=completed", headers=alice.headers)
        assert [t["title"] for t in by_status.json()["data"]] == ["Write report"]

        by_category = await client.get("/api/tasks?category=Health", headers=alice.headers)
        assert [t["title"] for t in by_category.json()["data"]] == ["Gym"]

        by_search = await client.get("/api/tasks?search=LEG", headers=alice.headers)
        assert [t["title"] for t in by_search.json()["data"]] == ["Gym"]

    async def test_due_date_range(self, client: AsyncClient, alice: UserHandle) -> None:
        now = datetime.now(timezone.utc)
        await create_task(client, alice, title="Soon", due_date=(now + timedelta(days=1)).isoformat())
        await create_task(client, alice, title="Later", due_date=(now + timedelta(days=30)).isoformat())

        cutoff = (now + timedelta(days=7)).strftime("%Y-%m-%dT%H:%M:%S")
        response = await client.get(
            "/api/tasks", params={"due_before": cutoff}, headers=alice.headers
        )
        assert [t["title"] for t in response.json()["data"]] == ["Soon"]

    async def test_order_by_priority(self, client: AsyncClient, alice: UserHandle) -> None:
        for priority in ("medium", "urgent", "low", "high"):
            await create_task(client, alice, title=priority, priority=priority)

        response = await client.get(
            "/api/tasks?order_by=priority&order_direction=desc", headers=alice.headers
        )
        assert [t["priority"] for t in response.json()["data"]] == [
            "urgent",
            "high",
            "medium",
            "low",
        ]

    async def test_invalid_workspace(self, client: AsyncClient, alice: UserHandle) -> None:
        response = await client.get("/api/tasks?workspace=everything", headers=alice.headers)
        assert response.status_code == 400

    async def test_team_workspace_requires_team_id(
        self, client: AsyncClient, alice: UserHandle
    ) -> None:
        response = await client.get("/api/tasks?workspace=team", headers=alice.headers)
        assert response.status_code == 400

    async def test_team_workspace_requires_membership(
        self, client: AsyncClient, carol: UserHandle, team: dict
    ) -> None:
        response = await client.get(
            f"/api/tasks?workspace=team&team_id={team['id']}", headers=carol.headers
        )
        assert response.status_code == 403

    async def test_team_workspace_lists_team_tasks(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        await create_task(client, alice, title="Shared", team_id=team["id"])

        response = await client.get(
            f"/api/tasks?workspace=team&team_id={team['id']}", headers=bob.headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["workspace"] == "team"
        assert [t["title"] for t in body["data"]] == ["Shared"]


class TestTeamTasks:
    async def test_member_cannot_create_team_task(
        self, client: AsyncClient, bob: UserHandle, team: dict
    ) -> None:
        response = await client.post(
            "/api/tasks", json={"title": "Nope", "team_id": team["id"]}, headers=bob.headers
        )
        assert response.status_code == 403

    async def test_assignee_must_be_member(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle, team: dict
    ) -> None:
        response = await client.post(
            "/api/tasks",
            json={"title": "Outsourced", "team_id": team["id"], "assigned_to": carol.id},
            headers=alice.headers,
        )
        assert response.status_code == 400

    async def test_assignment_notifies_assignee(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(
            client, alice, title="Ship it", team_id=team["id"], assigned_to=bob.id
        )
        assert task["assigned_by"] == alice.id

        response = await client.get(
            "/api/notifications?read=false", headers=bob.headers
        )
        types = [n["type"] for n in response.json()["data"]]
        assert "task_assigned" in types

    async def test_member_may_only_change_status(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Original", team_id=team["id"])
        url = f"/api/tasks/{task['id']}"

        rejected = await client.put(
            url, json={"status": "in_progress", "title": "Hijacked"}, headers=bob.headers
        )
        assert rejected.status_code == 403
        assert "status" in rejected.json()["error"]

        # Nothing from the rejected payload was applied
        current = (await client.get(url, headers=bob.headers)).json()["data"]
        assert current["title"] == "Original"
        assert current["status"] == "todo"

        allowed = await client.put(url, json={"status": "in_progress"}, headers=bob.headers)
        assert allowed.status_code == 200
        assert allowed.json()["data"]["status"] == "in_progress"

    async def test_leader_updates_any_field(
        self, client: AsyncClient, alice: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Draft", team_id=team["id"])
        response = await client.put(
            f"/api/tasks/{task['id']}",
            json={"title": "Final", "priority": "urgent", "category": "Work"},
            headers=alice.headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["priority"] == "urgent"

    async def test_member_cannot_delete(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Keep", team_id=team["id"])
        response = await client.delete(f"/api/tasks/{task['id']}", headers=bob.headers)
        assert response.status_code == 403

    async def test_outsider_cannot_read(
        self, client: AsyncClient, alice: UserHandle, carol: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Internal", team_id=team["id"])
        response = await client.get(f"/api/tasks/{task['id']}", headers=carol.headers)
        assert response.status_code == 403

    async def test_completion_by_member_notifies_owner(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        task = await create_task(client, alice, title="Finish", team_id=team["id"])
        await client.put(
            f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=bob.headers
        )

        response = await client.get("/api/notifications", headers=alice.headers)
        completed = [n for n in response.json()["data"] if n["type"] == "task_completed"]
        assert len(completed) == 1
        assert completed[0]["data"]["task_id"] == task["id"]


class TestStats:
    async def test_personal_stats(self, client: AsyncClient, alice: UserHandle) -> None:
        past = (datetime.now(timezone.utc) - timedelta(days=2)).isoformat()
        await create_task(client, alice, title="a")
        await create_task(client, alice, title="b", status="in_progress", due_date=past)
        await create_task(client, alice, title="c", status="completed", due_date=past)

        response = await client.get("/api/tasks/stats", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 3,
            "completed": 1,
            "todo": 1,
            "in_progress": 1,
            "overdue": 1,
        }

    async def test_team_stats(
        self, client: AsyncClient, alice: UserHandle, bob: UserHandle, team: dict
    ) -> None:
        await create_task(client, alice, title="x", team_id=team["id"], assigned_to=bob.id)
        await create_task(client, alice, title="y", team_id=team["id"], assigned_to=bob.id)
        await create_task(client, alice, title="z", team_id=team["id"])

        response = await client.get(f"/api/teams/{team['id']}/stats", headers=bob.headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 3
        assert data["todo"] == 3
        assert data["members_with_tasks"] == 1

    async def test_team_stats_requires_membership(
        self, client: AsyncClient, carol: UserHandle, team: dict
    ) -> None:
        response = await client.get(f"/api/teams/{team['id']}/stats", headers=carol.headers)
        assert response.status_code == 403
