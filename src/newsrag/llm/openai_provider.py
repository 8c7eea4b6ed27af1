"""OpenAI LLM provider — GPT-4o family and OpenAI-compatible endpoints.

Requires the ``openai`` extra and ``OPENAI_API_KEY`` env var.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from newsrag.errors import GenerationFailure, QuotaExceeded, SafetyBlocked
from newsrag.llm.base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

_SAFETY_CODES = {"content_filter", "content_policy_violation"}


class OpenAILLMProvider(LLMProvider):
    """Generate responses via the OpenAI Chat API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
        timeout: float = 60.0,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "openai package required: pip install newsfeed-rag[openai]"
            ) from exc

        self._openai = openai
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        kwargs: dict[str, Any] = {"timeout": timeout}
        if api_key:
            kwargs["api_key"] = api_key
        if base_url:
            kwargs["base_url"] = base_url

        self._client: Any = openai.OpenAI(**kwargs)

    def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            response = self._client.chat.completions.create(**self._request(prompt, system))
        except self._openai.APIError as exc:
            raise self._classify(exc) from exc

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise SafetyBlocked("Response withheld by content filter")
        return choice.message.content or ""

    def stream(self, prompt: str, system: str | None = None) -> Iterator[str]:
        try:
            events = self._client.chat.completions.create(
                **self._request(prompt, system), stream=True,
            )
            for event in events:
                if not event.choices:
                    continue
                choice = event.choices[0]
                if choice.finish_reason == "content_filter":
                    raise SafetyBlocked("Response withheld by content filter")
                if choice.delta and choice.delta.content:
                    yield choice.delta.content
        except self._openai.APIError as exc:
            raise self._classify(exc) from exc

    def _request(self, prompt: str, system: str | None) -> dict[str, Any]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _classify(self, exc: Exception) -> GenerationFailure:
        if isinstance(exc, self._openai.RateLimitError):
            return QuotaExceeded(str(exc))
        if getattr(exc, "code", None) in _SAFETY_CODES:
            return SafetyBlocked(str(exc))
        return GenerationFailure(f"OpenAI generation failed: {exc}")
