"""Data models for chunks."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChunkMetadata:
    """Article metadata copied onto each chunk so it renders standalone."""

    article_id: str = ""
    title: str = ""
    url: str = ""
    source: str = ""
    pub_date: str = ""
    author: str = ""
    categories: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class Chunk:
    """A single retrievable span of an article."""

    id: str
    text: str
    metadata: ChunkMetadata
    chunk_index: int = 0
