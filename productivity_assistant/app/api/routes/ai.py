"""
AI assistant routes.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.dependencies import CurrentUser
from app.schemas.ai import (
    CategorizeRequest,
    CategorySuggestion,
    PrioritizationResult,
    PrioritizeRequest,
)
from app.schemas.response import ApiResponse
from app.services.ai_service import ai_service
from app.services.llm_provider import LLMProvider, get_llm_provider

router = APIRouter(prefix="/ai", tags=["AI"])

Provider = Annotated[LLMProvider, Depends(get_llm_provider)]


@router.post(
    "/categorize",
    response_model=ApiResponse[CategorySuggestion],
    summary="Suggest a category for a task",
)
async def categorize(
    body: CategorizeRequest,
    current_user: CurrentUser,
    provider: Provider,
) -> ApiResponse[CategorySuggestion]:
    suggestion = await ai_service.categorize_task(provider, request=body)
    return ApiResponse(data=suggestion)


@router.post(
    "/prioritize",
    response_model=ApiResponse[PrioritizationResult],
    summary="Recommend an order for a list of tasks",
)
async def prioritize(
    body: PrioritizeRequest,
    current_user: CurrentUser,
    provider: Provider,
) -> ApiResponse[PrioritizationResult]:
    result = await ai_service.prioritize_tasks(provider, request=body)
    return ApiResponse(data=result)
