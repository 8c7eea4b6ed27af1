"""Ollama LLM provider — local-first, no API keys.

Supports Llama, Mistral, and any model available via Ollama.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any

import httpx

from newsrag.errors import GenerationFailure, QuotaExceeded
from newsrag.llm.base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3.1:8b"
DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaLLMProvider(LLMProvider):
    """Generate responses via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            resp = self._client.post("/api/generate", json=self._payload(prompt, system, False))
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise self._classify(exc) from exc
        return resp.json().get("response", "")

    def stream(self, prompt: str, system: str | None = None) -> Iterator[str]:
        payload = self._payload(prompt, system, True)
        try:
            with self._client.stream("POST", "/api/generate", json=payload) as resp:
                resp.raise_for_status()
                for line in resp.iter_lines():
                    if not line:
                        continue
                    event = json.loads(line)
                    if event.get("error"):
                        raise GenerationFailure(f"Ollama stream error: {event['error']}")
                    if event.get("response"):
                        yield event["response"]
                    if event.get("done"):
                        break
        except httpx.HTTPError as exc:
            raise self._classify(exc) from exc

    def _payload(self, prompt: str, system: str | None, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": stream,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        if system:
            payload["system"] = system
        return payload

    @staticmethod
    def _classify(exc: httpx.HTTPError) -> GenerationFailure:
        if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 429:
            return QuotaExceeded(str(exc))
        return GenerationFailure(f"Ollama generation failed: {exc}")
