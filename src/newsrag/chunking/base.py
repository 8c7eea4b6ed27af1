"""Abstract base class for all chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsrag.chunking.schemas import Chunk, ChunkMetadata


class BaseChunker(ABC):
    """Interface for text chunking strategies."""

    @abstractmethod
    def chunk(self, text: str, metadata: ChunkMetadata | None = None) -> list[Chunk]:
        """Split text into chunks.

        Args:
            text: Cleaned article text.
            metadata: Metadata to copy onto each chunk.

        Returns:
            List of ``Chunk`` objects in sequence order.
        """

    @classmethod
    def strategy_name(cls) -> str:
        """Return human-readable strategy name."""
        return cls.__name__
