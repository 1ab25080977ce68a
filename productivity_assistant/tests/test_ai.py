"""
AI assistant tests.
The hosted model is replaced by FakeLLMProvider; these tests cover prompt
construction, reply parsing and the error envelope.
"""
from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from app.schemas.ai import CategorizeRequest
from app.services.ai_service import build_categorize_prompt, parse_model_json
from app.services.llm_provider import LLMProviderError
from conftest import FakeLLMProvider, UserHandle


def _tasks(*ids: str) -> list[dict]:
    return [
        {"id": task_id, "title": f"Task {task_id}", "status": "pending", "priority": "medium"}
        for task_id in ids
    ]


class TestParseModelJson:
    def test_plain_object(self) -> None:
        assert parse_model_json('{"category": "Work"}') == {"category": "Work"}

    def test_fenced_object(self) -> None:
        text = '```json\n{"category": "Shopping", "confidence": 92}\n```'
        assert parse_model_json(text) == {"category": "Shopping", "confidence": 92}

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValueError):
            parse_model_json("[1, 2, 3]")

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_model_json("Sure! Here is your category: Work")


class TestCategorizePrompt:
    def test_includes_optional_fields_only_when_given(self) -> None:
        bare = build_categorize_prompt(CategorizeRequest(title="Buy milk"))
        assert "Task Title: Buy milk" in bare
        assert "Description:" not in bare
        assert "Priority:" not in bare

        full = build_categorize_prompt(
            CategorizeRequest(title="Buy milk", description="2 litres", priority="low")
        )
        assert "Description: 2 litres" in full
        assert "Priority: low" in full


class TestCategorize:
    async def test_suggestion_from_fenced_reply(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue(
            '```json\n{"category": "Shopping", "confidence": 95, '
            '"reasoning": "Groceries"}\n```'
        )
        response = await client.post(
            "/api/ai/categorize", json={"title": "Buy milk"}, headers=alice.headers
        )
        assert response.status_code == 200
        assert response.json()["data"] == {
            "category": "Shopping",
            "confidence": 95,
            "reasoning": "Groceries",
        }
        assert llm.calls[0]["temperature"] == 0.3
        assert "Buy milk" in llm.calls[0]["prompt"]

    async def test_missing_fields_get_defaults(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue("{}")
        response = await client.post(
            "/api/ai/categorize", json={"title": "Something"}, headers=alice.headers
        )
        assert response.json()["data"] == {
            "category": "Other",
            "confidence": 50,
            "reasoning": "AI-suggested category",
        }

    async def test_confidence_is_clamped(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue('{"category": "Work", "confidence": 140}')
        response = await client.post(
            "/api/ai/categorize", json={"title": "Quarterly report"}, headers=alice.headers
        )
        assert response.json()["data"]["confidence"] == 100

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("Infinity", 100), ("1e999", 100), ("-Infinity", 0), ("NaN", 50)],
    )
    async def test_non_finite_confidence(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider, raw: str, expected: int
    ) -> None:
        llm.queue(f'{{"category": "Shopping", "confidence": {raw}}}')
        response = await client.post(
            "/api/ai/categorize", json={"title": "Buy milk"}, headers=alice.headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["confidence"] == expected

    async def test_malformed_reply_is_ai_error(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue("I think this is Work.")
        response = await client.post(
            "/api/ai/categorize", json={"title": "Buy milk"}, headers=alice.headers
        )
        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "AI_SERVICE_ERROR"
        assert body["error"] == "Failed to categorize task with AI"

    async def test_provider_failure_is_ai_error(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue(LLMProviderError("upstream timeout"))
        response = await client.post(
            "/api/ai/categorize", json={"title": "Buy milk"}, headers=alice.headers
        )
        assert response.status_code == 500
        assert response.json()["code"] == "AI_SERVICE_ERROR"

    async def test_title_required(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        response = await client.post("/api/ai/categorize", json={}, headers=alice.headers)
        assert response.status_code == 400
        assert llm.calls == []

    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.post("/api/ai/categorize", json={"title": "Buy milk"})
        assert response.status_code == 401


class TestPrioritize:
    async def test_camel_case_reply_is_parsed(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue(json.dumps({
            "prioritizedTasks": [
                {"taskId": "b", "recommendedOrder": 1, "score": 90,
                 "reasoning": "Due tomorrow", "suggestedPriority": "urgent"},
                {"taskId": "a", "recommendedOrder": 2, "score": 40, "reasoning": "Can wait"},
            ],
            "summary": "Deadline first",
        }))
        response = await client.post(
            "/api/ai/prioritize",
            json={"tasks": _tasks("a", "b"), "userContext": {"preferences": "mornings"}},
            headers=alice.headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["summary"] == "Deadline first"
        assert [t["task_id"] for t in data["prioritized_tasks"]] == ["b", "a"]
        assert data["prioritized_tasks"][0]["suggested_priority"] == "urgent"
        assert data["prioritized_tasks"][1]["suggested_priority"] is None

        call = llm.calls[0]
        assert call["temperature"] == 0.4
        assert "User's preferences: mornings" in call["prompt"]
        assert '"id": "a"' in call["prompt"]

    async def test_missing_summary_defaults(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue('{"prioritizedTasks": []}')
        response = await client.post(
            "/api/ai/prioritize", json={"tasks": _tasks("a")}, headers=alice.headers
        )
        data = response.json()["data"]
        assert data == {"prioritized_tasks": [], "summary": "AI-generated prioritization"}

    async def test_empty_task_list_rejected(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        response = await client.post(
            "/api/ai/prioritize", json={"tasks": []}, headers=alice.headers
        )
        assert response.status_code == 400
        assert llm.calls == []

    async def test_unusable_entries_are_ai_error(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider
    ) -> None:
        llm.queue('{"prioritizedTasks": [{"score": 10}], "summary": "x"}')
        response = await client.post(
            "/api/ai/prioritize", json={"tasks": _tasks("a")}, headers=alice.headers
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to prioritize tasks with AI"

    @pytest.mark.parametrize("score", ["NaN", "Infinity", "-Infinity"])
    async def test_non_finite_score_is_ai_error(
        self, client: AsyncClient, alice: UserHandle, llm: FakeLLMProvider, score: str
    ) -> None:
        llm.queue(
            f'{{"prioritizedTasks": [{{"taskId": "a", "recommendedOrder": 1, "score": {score}}}], '
            '"summary": "x"}'
        )
        response = await client.post(
            "/api/ai/prioritize", json={"tasks": _tasks("a")}, headers=alice.headers
        )
        assert response.status_code == 500
        assert response.json()["code"] == "AI_SERVICE_ERROR"
