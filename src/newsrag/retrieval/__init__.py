"""Retrieval — similarity search, threshold filtering, context packing."""

from newsrag.retrieval.context import ContextAssembler
from newsrag.retrieval.retriever import Retriever
from newsrag.retrieval.schemas import (
    ArticleHit,
    ContextWindow,
    RetrievalConfig,
    RetrievalResult,
    SourceCitation,
)

__all__ = [
    "ArticleHit",
    "ContextAssembler",
    "ContextWindow",
    "RetrievalConfig",
    "RetrievalResult",
    "Retriever",
    "SourceCitation",
]
