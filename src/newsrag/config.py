"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_FEEDS = [
    "https://feeds.bbci.co.uk/news/world/rss.xml",
    "https://www.theguardian.com/world/rss",
    "https://feeds.npr.org/1001/rss.xml",
]

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    provider: str = "jina"
    model: str = "jina-embeddings-v3"
    dimension: int = 768
    max_input_chars: int = 8000
    max_attempts: int = 3
    retry_delay: float = 1.0
    batch_size: int = 10
    max_concurrency: int = 5
    batch_pause: float = 0.5
    timeout: float = 30.0
    query_template: str = "Question about recent news: {query}"


class VectorStoreSettings(BaseModel):
    backend: str = "qdrant"
    url: str | None = None
    api_key: str | None = None
    path: str | None = "local_data/qdrant"
    collection: str = "news_articles"


class LLMSettings(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 1024
    timeout: float = 60.0


class ChunkingSettings(BaseModel):
    max_chunk_size: int = 500
    overlap_sentences: int = 2
    min_final_chunk: int = 50
    min_text_length: int = 100


class RetrievalSettings(BaseModel):
    top_k: int = 5
    similarity_threshold: float = 0.7
    context_budget: int = 4000
    max_sources: int = 5


class IngestionSettings(BaseModel):
    feeds: list[str] = Field(default_factory=lambda: list(DEFAULT_FEEDS))
    max_entries_per_feed: int = 10
    feed_timeout: float = 15.0
    article_timeout: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; NewsBot/1.0)"
    seen_store_path: str | None = None
    min_selector_chars: int = 200
    min_content_chars: int = 100


class InteractionSettings(BaseModel):
    log_path: str | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    interactions: InteractionSettings = Field(default_factory=InteractionSettings)


# (env var, section, key, converter)
_ENV_OVERRIDES: list[tuple[str, str, str, Any]] = [
    ("QDRANT_URL", "vectorstore", "url", str),
    ("QDRANT_API_KEY", "vectorstore", "api_key", str),
    ("RSS_FEEDS", "ingestion", "feeds", lambda v: [u.strip() for u in v.split(",") if u.strip()]),
    ("MAX_ARTICLES_PER_SOURCE", "ingestion", "max_entries_per_feed", int),
    ("MAX_CHUNK_SIZE", "chunking", "max_chunk_size", int),
    ("VECTOR_SEARCH_LIMIT", "retrieval", "top_k", int),
    ("SIMILARITY_THRESHOLD", "retrieval", "similarity_threshold", float),
]


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("NEWSRAG_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for env_name, section, key, convert in _ENV_OVERRIDES:
        value = os.getenv(env_name)
        if not value:
            continue
        raw.setdefault(section, {})[key] = convert(value)
    return raw


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML file, falling back to defaults.

    Environment variables listed in ``_ENV_OVERRIDES`` win over the file.
    """
    settings_path = Path(path) if path else _find_settings_file()

    raw: dict[str, Any] = {}
    if settings_path is not None:
        with open(settings_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    return Settings(**_apply_env_overrides(raw))
