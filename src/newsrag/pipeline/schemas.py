"""Data models for the query and ingestion pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from newsrag.errors import EmbeddingFailure
from newsrag.retrieval.schemas import SourceCitation


class QueryState(StrEnum):
    """Stages a single query passes through."""

    RECEIVED = "received"
    EMBEDDING_QUERY = "embedding_query"
    SEARCHING = "searching"
    NO_MATCH = "no_match"
    RESPONDING_FALLBACK = "responding_fallback"
    ASSEMBLING_CONTEXT = "assembling_context"
    GENERATING = "generating"
    STREAMING_DELTAS = "streaming_deltas"
    ERROR = "error"
    DONE = "done"


@dataclass
class QueryMetrics:
    """Timing and volume figures reported with every answered query."""

    processing_time_ms: int = 0
    chunks_found: int = 0
    chunks_used: int = 0
    context_length: int = 0


@dataclass
class QueryResult:
    """Output of one query through the pipeline."""

    query: str
    response: str
    citations: list[SourceCitation] = field(default_factory=list)
    metrics: QueryMetrics = field(default_factory=QueryMetrics)
    states: list[QueryState] = field(default_factory=list)
    model: str = ""


@dataclass
class Interaction:
    """A completed query/response cycle handed to the interaction log."""

    session_id: str
    query: str
    response: str
    citations: list[SourceCitation] = field(default_factory=list)
    metrics: QueryMetrics = field(default_factory=QueryMetrics)
    created_at: str = ""


@dataclass
class IngestResult:
    """Result of ingesting one article."""

    source: str
    chunks_created: int
    chunks_embedded: int
    chunks_stored: int
    failures: list[EmbeddingFailure] = field(default_factory=list)


@dataclass
class IngestionRun:
    """Summary of one acquisition + ingestion run."""

    articles_acquired: int = 0
    articles_ingested: int = 0
    chunks_stored: int = 0
    results: list[IngestResult] = field(default_factory=list)
    started_at: str = ""
    finished_at: str = ""


@dataclass
class IngestionStats:
    """Lifetime counters of an ``IngestionJob``."""

    total_runs: int = 0
    successful_runs: int = 0
    failed_runs: int = 0
    skipped_runs: int = 0
    total_articles_processed: int = 0
    last_run: str | None = None
    is_running: bool = False
