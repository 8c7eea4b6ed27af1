"""Anthropic Claude LLM provider.

Requires the ``anthropic`` extra and ``ANTHROPIC_API_KEY`` env var.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from newsrag.errors import GenerationFailure, QuotaExceeded, SafetyBlocked
from newsrag.llm.base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicLLMProvider(LLMProvider):
    """Generate responses via the Anthropic API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
        timeout: float = 60.0,
    ):
        try:
            import anthropic
        except ImportError as exc:
            raise ImportError(
                "anthropic package required: pip install newsfeed-rag[anthropic]"
            ) from exc

        self._anthropic = anthropic
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Any = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            response = self._client.messages.create(**self._request(prompt, system))
        except self._anthropic.APIError as exc:
            raise self._classify(exc) from exc

        if response.stop_reason == "refusal":
            raise SafetyBlocked("Model refused to answer")
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

    def stream(self, prompt: str, system: str | None = None) -> Iterator[str]:
        try:
            with self._client.messages.stream(**self._request(prompt, system)) as events:
                yield from events.text_stream
                final = events.get_final_message()
        except self._anthropic.APIError as exc:
            raise self._classify(exc) from exc

        if final.stop_reason == "refusal":
            raise SafetyBlocked("Model refused to answer")

    def _request(self, prompt: str, system: str | None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        return kwargs

    def _classify(self, exc: Exception) -> GenerationFailure:
        if isinstance(exc, self._anthropic.RateLimitError):
            return QuotaExceeded(str(exc))
        return GenerationFailure(f"Anthropic generation failed: {exc}")
