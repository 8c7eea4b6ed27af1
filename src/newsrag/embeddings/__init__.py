"""Embedding providers — Jina, Ollama, OpenAI — and the retrying batcher."""

from newsrag.embeddings.base import EmbeddingProvider
from newsrag.embeddings.batcher import BatchEmbedding, EmbeddingBatcher
from newsrag.embeddings.factory import available_providers, get_embedding_provider

__all__ = [
    "BatchEmbedding",
    "EmbeddingBatcher",
    "EmbeddingProvider",
    "available_providers",
    "get_embedding_provider",
]
