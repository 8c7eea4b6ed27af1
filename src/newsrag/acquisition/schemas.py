"""Data models for feed ingestion."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FeedEntry:
    """One item of an RSS/Atom feed, before the article page is fetched."""

    title: str
    link: str
    description: str = ""
    pub_date: str = ""
    author: str = ""
    categories: list[str] = field(default_factory=list)


@dataclass
class Article:
    """A news article acquired from a feed.

    Attributes:
        id: Stable identifier derived from the canonical URL.
        title: Headline from the feed entry.
        url: Article link; the dedup key.
        content: Cleaned text ready for chunking.
        raw_content: Extracted page text (or entry description) before cleaning.
        source: Publisher name derived from the feed URL.
        author: Byline, when the feed provides one.
        pub_date: ISO-8601 publish timestamp.
        categories: Feed category tags.
        processed_at: ISO-8601 time the article was acquired.
    """

    id: str
    title: str
    url: str
    content: str
    raw_content: str = ""
    source: str = ""
    author: str = ""
    pub_date: str = ""
    categories: list[str] = field(default_factory=list)
    processed_at: str = ""


@dataclass
class AcquisitionStats:
    """Snapshot of the acquirer's dedup state."""

    processed_articles: int
    sources: int
    last_ingestion: str | None = None
