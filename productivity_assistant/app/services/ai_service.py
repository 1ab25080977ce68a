"""
AI task assistant.
Builds the categorization and prioritization prompts, calls the model,
strips Markdown code fences from the reply, parses the JSON and fills in
defaults for anything the model left out.
"""
from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from app.core.exceptions import AIServiceException
from app.schemas.ai import (
    CategorizeRequest,
    CategorySuggestion,
    PrioritizationResult,
    PrioritizeRequest,
)
from app.services.llm_provider import LLMProvider, LLMProviderError

logger = logging.getLogger(__name__)

CATEGORIZE_TEMPERATURE = 0.3
PRIORITIZE_TEMPERATURE = 0.4

DEFAULT_CATEGORY = "Other"
DEFAULT_CONFIDENCE = 50
DEFAULT_CATEGORY_REASONING = "AI-suggested category"
DEFAULT_PRIORITIZATION_SUMMARY = "AI-generated prioritization"

_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```")


def build_categorize_prompt(request: CategorizeRequest) -> str:
    lines = [
        "You are a task categorization AI assistant. Analyze the following task "
        "and suggest an appropriate category.",
        "",
        f"Task Title: {request.title}",
    ]
    if request.description:
        lines.append(f"Description: {request.description}")
    if request.priority:
        lines.append(f"Priority: {request.priority}")
    lines += [
        "",
        "Common categories include: Work, Personal, Health, Finance, Learning, "
        "Shopping, Home, Creative, Social, Travel, Other.",
        "",
        "Respond in JSON format with:",
        "{",
        '  "category": "suggested category name",',
        '  "confidence": confidence score from 0-100,',
        '  "reasoning": "brief explanation why this category fits"',
        "}",
        "",
        "Choose the most appropriate category based on the task content. "
        "Only respond with valid JSON.",
    ]
    return "\n".join(lines)


def build_prioritize_prompt(request: PrioritizeRequest) -> str:
    tasks = [task.model_dump(exclude_none=True) for task in request.tasks]
    lines = [
        "You are a smart task prioritization AI assistant. Analyze the following "
        "tasks and recommend the optimal order to complete them.",
        "",
        "Consider:",
        "- Deadlines (due_date)",
        "- Current priority level",
        "- Task status",
        "- Category and context",
        "- Estimated impact and effort",
    ]
    context = request.user_context
    if context is not None and context.past_behavior:
        lines.append(f"- User's past behavior: {context.past_behavior}")
    if context is not None and context.preferences:
        lines.append(f"- User's preferences: {context.preferences}")
    lines += [
        "",
        "Tasks to prioritize:",
        json.dumps(tasks, indent=2),
        "",
        "Respond in JSON format with:",
        "{",
        '  "prioritizedTasks": [',
        "    {",
        '      "taskId": "task id",',
        '      "recommendedOrder": 1,',
        '      "score": 0-100 priority score,',
        '      "reasoning": "why this task should be done at this order",',
        '      "suggestedPriority": "low|medium|high|urgent (optional update)"',
        "    }",
        "  ],",
        '  "summary": "Overall prioritization strategy and key insights"',
        "}",
        "",
        "Focus on high-value tasks, urgent deadlines, and minimizing context "
        "switching. Only respond with valid JSON.",
    ]
    return "\n".join(lines)


def parse_model_json(text: str) -> dict[str, Any]:
    """Strip code fences and decode a JSON object; ValueError on anything else."""
    cleaned = _FENCE_RE.sub("", text.strip()).strip()
    result = json.loads(cleaned)
    if not isinstance(result, dict):
        raise ValueError("Model response is not a JSON object")
    return result


def _confidence(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if math.isnan(confidence):
        return DEFAULT_CONFIDENCE
    return round(max(0.0, min(100.0, confidence)))


class AIService:

    async def categorize_task(
        self, provider: LLMProvider, *, request: CategorizeRequest
    ) -> CategorySuggestion:
        raw = await self._ask(
            provider, build_categorize_prompt(request), CATEGORIZE_TEMPERATURE, "categorize task"
        )
        return CategorySuggestion(
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            confidence=_confidence(raw.get("confidence")),
            reasoning=str(raw.get("reasoning") or DEFAULT_CATEGORY_REASONING),
        )

    async def prioritize_tasks(
        self, provider: LLMProvider, *, request: PrioritizeRequest
    ) -> PrioritizationResult:
        raw = await self._ask(
            provider, build_prioritize_prompt(request), PRIORITIZE_TEMPERATURE, "prioritize tasks"
        )
        try:
            return PrioritizationResult(
                prioritized_tasks=raw.get("prioritizedTasks") or [],
                summary=str(raw.get("summary") or DEFAULT_PRIORITIZATION_SUMMARY),
            )
        except ValidationError as exc:
            logger.error("Unusable prioritization from %s: %s", provider.get_provider_name(), exc)
            raise AIServiceException("Failed to prioritize tasks with AI") from exc

    async def _ask(
        self, provider: LLMProvider, prompt: str, temperature: float, purpose: str
    ) -> dict[str, Any]:
        try:
            text = await provider.generate(prompt, temperature=temperature)
            return parse_model_json(text)
        except LLMProviderError as exc:
            logger.error("Model call to %s failed: %s", provider.get_provider_name(), exc)
            raise AIServiceException(f"Failed to {purpose} with AI") from exc
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            logger.error("Malformed model output from %s: %s", provider.get_provider_name(), exc)
            raise AIServiceException(f"Failed to {purpose} with AI") from exc


ai_service = AIService()
