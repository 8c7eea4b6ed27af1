"""Data models for retrieval operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from newsrag.vectorstore.schemas import SearchFilter, SearchResult


@dataclass
class RetrievalConfig:
    """Configuration for a retrieval operation."""

    top_k: int = 5
    similarity_threshold: float = 0.7
    search_filter: SearchFilter | None = None


@dataclass
class RetrievalResult:
    """Hits that cleared the similarity threshold.

    ``total_candidates`` counts what the index returned before filtering.
    """

    query: str
    results: list[SearchResult] = field(default_factory=list)
    total_candidates: int = 0


@dataclass
class ContextWindow:
    """Rendered grounding text plus the chunks that made it in."""

    text: str
    chunks: list[SearchResult] = field(default_factory=list)
    length: int = 0


@dataclass(frozen=True)
class SourceCitation:
    """One cited article with the best score among its used chunks."""

    title: str
    url: str
    source: str
    pub_date: str
    score: float


@dataclass
class ArticleHit:
    """An article-level search hit aggregated over its chunks."""

    title: str
    url: str
    source: str
    pub_date: str
    score: float
    chunk_count: int = 1
