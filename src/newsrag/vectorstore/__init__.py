"""Vector store backends — Qdrant (production) and FAISS (local)."""

from newsrag.vectorstore.base import VectorStore
from newsrag.vectorstore.factory import available_stores, get_vector_store
from newsrag.vectorstore.schemas import SearchFilter, SearchResult, VectorRecord

__all__ = [
    "SearchFilter",
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "available_stores",
    "get_vector_store",
]
