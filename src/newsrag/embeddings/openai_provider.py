"""OpenAI embedding provider — text-embedding-3-small/large.

Requires ``openai`` extra and an API key via ``OPENAI_API_KEY`` env var.
"""

from __future__ import annotations

import logging
from typing import Any

from newsrag.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_DIM = 768


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text via the OpenAI Embeddings API.

    The v3 models accept a ``dimensions`` argument, so the vector size is
    pinned to the index's configured dimension.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimension: int = DEFAULT_DIM,
        timeout: float = 30.0,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "openai package required: pip install newsfeed-rag[openai]"
            ) from exc

        self.model = model
        self._dimension = dimension
        self._client: Any = openai.OpenAI(api_key=api_key, timeout=timeout)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        resp = self._client.embeddings.create(
            model=self.model,
            input=texts,
            dimensions=self._dimension,
        )
        # Sort by index to guarantee order
        sorted_data = sorted(resp.data, key=lambda x: x.index)
        return [d.embedding for d in sorted_data]

    @property
    def dimension(self) -> int:
        return self._dimension
