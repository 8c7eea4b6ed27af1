"""Jina AI embedding provider.

Requires ``JINA_API_KEY`` in the environment (or an explicit ``api_key``).
"""

from __future__ import annotations

import logging
import os

import httpx

from newsrag.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "jina-embeddings-v3"
DEFAULT_BASE_URL = "https://api.jina.ai/v1"
DEFAULT_DIM = 768


class JinaEmbeddingProvider(EmbeddingProvider):
    """Embed text via the Jina Embeddings API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimension: int = DEFAULT_DIM,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        api_key = api_key or os.getenv("JINA_API_KEY")
        if not api_key:
            raise ValueError("JINA_API_KEY not configured")

        self.model = model
        self._dimension = dimension
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return self._embed(texts, task="retrieval.passage")

    def embed_query(self, query: str) -> list[float]:
        return self._embed([query], task="retrieval.query")[0]

    @property
    def dimension(self) -> int:
        return self._dimension

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _embed(self, texts: list[str], task: str) -> list[list[float]]:
        resp = self._client.post(
            "/embeddings",
            json={
                "model": self.model,
                "input": texts,
                "task": task,
                "dimensions": self._dimension,
            },
        )
        resp.raise_for_status()
        data = resp.json().get("data")
        if not data or len(data) != len(texts):
            raise ValueError("Invalid response format from Jina API")
        # Sort by index to guarantee order
        return [d["embedding"] for d in sorted(data, key=lambda d: d.get("index", 0))]
