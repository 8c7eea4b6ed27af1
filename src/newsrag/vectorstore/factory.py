"""Vector store factory."""

from __future__ import annotations

from newsrag.registry import Registry
from newsrag.vectorstore.base import VectorStore

_stores: Registry[VectorStore] = Registry("vector store", [
    ("qdrant", "newsrag.vectorstore.qdrant_store", "QdrantStore"),
    ("faiss", "newsrag.vectorstore.faiss_store", "FAISSStore"),
])


def get_vector_store(provider: str = "qdrant", **kwargs) -> VectorStore:
    """Get a vector store by name (``qdrant``, ``faiss``)."""
    return _stores.create(provider, **kwargs)


def available_stores() -> list[str]:
    """Return names of registered vector stores."""
    return _stores.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _stores.clear()
