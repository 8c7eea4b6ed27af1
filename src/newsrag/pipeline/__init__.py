"""End-to-end news pipeline — ingest, query, chat turns, prompts."""

from newsrag.pipeline.channel import ChatEvent, MemorySessionChannel, SessionChannel
from newsrag.pipeline.chat import ChatService
from newsrag.pipeline.ingest import IngestionJob, IngestPipeline
from newsrag.pipeline.interactions import (
    InteractionLog,
    JsonlInteractionLog,
    MemoryInteractionLog,
)
from newsrag.pipeline.query import QueryPipeline
from newsrag.pipeline.schemas import (
    IngestionRun,
    IngestionStats,
    IngestResult,
    Interaction,
    QueryMetrics,
    QueryResult,
    QueryState,
)

__all__ = [
    "ChatEvent",
    "ChatService",
    "IngestPipeline",
    "IngestResult",
    "IngestionJob",
    "IngestionRun",
    "IngestionStats",
    "Interaction",
    "InteractionLog",
    "JsonlInteractionLog",
    "MemoryInteractionLog",
    "MemorySessionChannel",
    "QueryMetrics",
    "QueryPipeline",
    "QueryResult",
    "QueryState",
    "SessionChannel",
]
