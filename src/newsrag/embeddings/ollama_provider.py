"""Ollama embedding provider for running the news index fully offline.

Talks to a local Ollama server's batch ``/api/embed`` endpoint.
"""

from __future__ import annotations

import logging

import httpx

from newsrag.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_DIM = 768


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embed article chunks and questions via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        dimension: int = DEFAULT_DIM,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.model = model
        self._dimension = dimension
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        resp = self._client.post("/api/embed", json={"model": self.model, "input": texts})
        resp.raise_for_status()
        vectors = resp.json().get("embeddings")
        if not vectors or len(vectors) != len(texts):
            raise ValueError(f"Ollama returned {len(vectors or [])} embeddings for {len(texts)} inputs")
        return vectors

    @property
    def dimension(self) -> int:
        return self._dimension
