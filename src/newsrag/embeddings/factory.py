"""Embedding provider factory."""

from __future__ import annotations

from newsrag.embeddings.base import EmbeddingProvider
from newsrag.registry import Registry

_providers: Registry[EmbeddingProvider] = Registry("embedding provider", [
    ("jina", "newsrag.embeddings.jina_provider", "JinaEmbeddingProvider"),
    ("ollama", "newsrag.embeddings.ollama_provider", "OllamaEmbeddingProvider"),
    ("openai", "newsrag.embeddings.openai_provider", "OpenAIEmbeddingProvider"),
])


def get_embedding_provider(provider: str = "jina", **kwargs) -> EmbeddingProvider:
    """Get an embedding provider by name.

    Args:
        provider: One of ``jina``, ``ollama``, ``openai``.
        **kwargs: Passed to the provider constructor.
    """
    return _providers.create(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered embedding providers."""
    return _providers.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _providers.clear()
