"""Abstract base class for vector stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsrag.vectorstore.schemas import SearchFilter, SearchResult, VectorRecord


class VectorStore(ABC):
    """Interface for vector index backends.

    ``search`` ranks by descending cosine similarity.
    """

    @abstractmethod
    def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace records by id.

        Returns:
            Number of records written.
        """

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        search_filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        """Search for similar chunks.

        Args:
            query_embedding: The query vector.
            top_k: Maximum results to return.
            search_filter: Optional payload filter.

        Returns:
            List of ``SearchResult`` sorted by score (highest first).
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of records in the store."""

    @abstractmethod
    def clear(self) -> None:
        """Delete all records."""

    def close(self) -> None:
        """Release the backend's client or file handles."""

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__
