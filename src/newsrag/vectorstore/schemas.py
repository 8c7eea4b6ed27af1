"""Data models for vector store operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from newsrag.chunking.schemas import ChunkMetadata


@dataclass
class VectorRecord:
    """A chunk with its embedding, ready for storage."""

    id: str
    text: str
    embedding: list[float]
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)
    chunk_index: int = 0


@dataclass(frozen=True)
class SearchResult:
    """A single ranked hit from the vector store."""

    id: str
    text: str
    score: float
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)
    chunk_index: int = 0


@dataclass
class SearchFilter:
    """Restrict search to matching payloads.

    All specified fields must match (AND logic). Dates are ISO-8601
    strings; values without a timezone are read as UTC.
    """

    source: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    category: str | None = None

    def is_empty(self) -> bool:
        return not (self.source or self.date_from or self.date_to or self.category)

    def matches(self, meta: ChunkMetadata) -> bool:
        """Check if a chunk's metadata matches this filter."""
        if self.source and meta.source != self.source:
            return False
        if self.category and self.category not in meta.categories:
            return False
        if self.date_from or self.date_to:
            if not meta.pub_date:
                return False
            published = parse_timestamp(meta.pub_date)
            if self.date_from and published < parse_timestamp(self.date_from):
                return False
            if self.date_to and published > parse_timestamp(self.date_to):
                return False
        return True


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime, defaulting to UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def record_to_payload(record: VectorRecord) -> dict[str, Any]:
    """Flatten a record into the index payload."""
    meta = record.metadata
    return {
        "text": record.text,
        "article_id": meta.article_id,
        "article_title": meta.title,
        "article_url": meta.url,
        "source": meta.source,
        "pub_date": meta.pub_date,
        "author": meta.author,
        "categories": list(meta.categories),
        "chunk_index": record.chunk_index,
    }


def payload_to_metadata(payload: dict[str, Any]) -> ChunkMetadata:
    return ChunkMetadata(
        article_id=payload.get("article_id", ""),
        title=payload.get("article_title", ""),
        url=payload.get("article_url", ""),
        source=payload.get("source", ""),
        pub_date=payload.get("pub_date", ""),
        author=payload.get("author", ""),
        categories=tuple(payload.get("categories") or ()),
    )
