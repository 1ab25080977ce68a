"""
AI assistant Pydantic schemas.
Request bodies for categorization and prioritization, and the validated
shapes of what the model returns.
"""
from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.task import TaskPriority


# ── Categorize ────────────────────────────────────────────────────────────────

class CategorizeRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    priority: TaskPriority | None = None


class CategorySuggestion(BaseModel):
    category: str
    confidence: int = Field(ge=0, le=100)
    reasoning: str


# ── Prioritize ────────────────────────────────────────────────────────────────

class PrioritizeTaskItem(BaseModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    status: str = Field(min_length=1)
    priority: str = Field(min_length=1)
    description: str | None = None
    category: str | None = None
    due_date: str | None = None
    created_at: str | None = None


class UserContext(BaseModel):
    past_behavior: str | None = Field(
        default=None, validation_alias=AliasChoices("past_behavior", "pastBehavior")
    )
    preferences: str | None = None


class PrioritizeRequest(BaseModel):
    tasks: list[PrioritizeTaskItem] = Field(min_length=1, max_length=100)
    user_context: UserContext | None = Field(
        default=None, validation_alias=AliasChoices("user_context", "userContext")
    )


class PrioritizedTask(BaseModel):
    task_id: str = Field(validation_alias=AliasChoices("taskId", "task_id"))
    recommended_order: int = Field(
        validation_alias=AliasChoices("recommendedOrder", "recommended_order")
    )
    score: float = Field(default=0, allow_inf_nan=False)
    reasoning: str = ""
    suggested_priority: str | None = Field(
        default=None,
        validation_alias=AliasChoices("suggestedPriority", "suggested_priority"),
    )


class PrioritizationResult(BaseModel):
    prioritized_tasks: list[PrioritizedTask] = []
    summary: str
