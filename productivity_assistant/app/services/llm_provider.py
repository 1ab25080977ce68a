"""
Hosted language model adapter.
LLMProvider is the seam the AI service talks to; OpenAICompatibleProvider
reaches any OpenAI-compatible chat completions endpoint (Gemini by default).
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

import openai

from app.core.config import settings

logger = logging.getLogger(__name__)


class LLMProviderError(Exception):
    """The model call failed or returned no text."""


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, *, temperature: float = 0.3, max_tokens: int = 2000) -> str:
        """Return the model's text completion for a single user prompt."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get LLM provider name"""


class OpenAICompatibleProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self._client: openai.AsyncOpenAI | None = None

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def generate(self, prompt: str, *, temperature: float = 0.3, max_tokens: int = 2000) -> str:
        if not self.api_key:
            raise LLMProviderError("AI_API_KEY is not configured")

        start_time = time.monotonic()
        try:
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as exc:
            raise LLMProviderError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMProviderError("Model returned an empty response")

        logger.info(
            "LLM response generated in %.2fs using %s",
            time.monotonic() - start_time,
            self.get_provider_name(),
        )
        return content

    def get_provider_name(self) -> str:
        return f"openai-compatible-{self.model}"


llm_provider = OpenAICompatibleProvider(
    api_key=settings.AI_API_KEY,
    model=settings.AI_MODEL,
    base_url=settings.AI_BASE_URL or None,
    timeout=settings.AI_TIMEOUT_SECONDS,
)


def get_llm_provider() -> LLMProvider:
    """FastAPI dependency; override in tests."""
    return llm_provider
