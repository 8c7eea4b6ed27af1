"""Content acquirer — feeds → new entries → article pages → cleaned articles.

One failing feed or article never aborts the run: the failure is logged
and the acquirer moves on, so a run returns whatever succeeded.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from newsrag.acquisition.extractor import ContentExtractor
from newsrag.acquisition.feeds import FeedReader, source_name
from newsrag.acquisition.sanitize import clean_text
from newsrag.acquisition.schemas import AcquisitionStats, Article, FeedEntry
from newsrag.acquisition.seen import MemorySeenStore, SeenStore, canonical_url
from newsrag.errors import FetchFailure

logger = logging.getLogger(__name__)


class ContentAcquirer:
    """Fetch feeds and turn previously unseen entries into ``Article`` objects."""

    def __init__(
        self,
        feeds: list[str],
        reader: FeedReader | None = None,
        extractor: ContentExtractor | None = None,
        seen: SeenStore | None = None,
        max_entries_per_feed: int = 10,
    ):
        self.feeds = list(feeds)
        self.reader = reader or FeedReader()
        self.extractor = extractor or ContentExtractor()
        self.seen = seen or MemorySeenStore()
        self.max_entries_per_feed = max_entries_per_feed
        self._last_ingestion: str | None = None

    def acquire_all(self, feeds: Iterable[str] | None = None) -> list[Article]:
        """Run every feed, isolating failures per feed."""
        articles: list[Article] = []
        for feed_url in feeds or self.feeds:
            try:
                fetched = self.acquire_feed(feed_url)
            except FetchFailure as exc:
                logger.warning("Skipping feed %s: %s", feed_url, exc.reason)
                continue
            articles.extend(fetched)
            logger.info("Acquired %d articles from %s", len(fetched), feed_url)

        self._last_ingestion = datetime.now(UTC).isoformat()
        logger.info("Total articles acquired: %d", len(articles))
        return articles

    def acquire_feed(self, feed_url: str) -> list[Article]:
        """Process up to ``max_entries_per_feed`` entries of one feed.

        Raises:
            FetchFailure: If the feed itself cannot be fetched or parsed.
        """
        entries = self.reader.fetch_entries(feed_url)
        source = source_name(feed_url)

        articles: list[Article] = []
        for entry in entries[: self.max_entries_per_feed]:
            if self.seen.contains(entry.link):
                continue
            try:
                article = self.build_article(entry, source)
            except Exception:
                logger.warning("Failed to process article %s", entry.link, exc_info=True)
                continue
            if article is None:
                continue
            self.seen.add(entry.link)
            articles.append(article)
        return articles

    def build_article(self, entry: FeedEntry, source: str) -> Article | None:
        """Fetch the entry's page and assemble a cleaned article.

        Falls back to the entry description when the page yields no
        usable text; returns ``None`` when nothing usable remains.
        """
        raw = self._fetch_content(entry.link) or entry.description
        content = clean_text(raw)
        if not content:
            logger.info("No usable content for %s", entry.link)
            return None

        return Article(
            id=str(uuid.uuid5(uuid.NAMESPACE_URL, canonical_url(entry.link))),
            title=entry.title,
            url=entry.link,
            content=content,
            raw_content=raw,
            source=source,
            author=entry.author,
            pub_date=entry.pub_date,
            categories=list(entry.categories),
            processed_at=datetime.now(UTC).isoformat(),
        )

    def stats(self) -> AcquisitionStats:
        return AcquisitionStats(
            processed_articles=self.seen.count(),
            sources=len(self.feeds),
            last_ingestion=self._last_ingestion,
        )

    def _fetch_content(self, url: str) -> str | None:
        try:
            html = self.reader.fetch_page(url)
        except FetchFailure as exc:
            logger.warning("Failed to fetch full content from %s: %s", url, exc.reason)
            return None
        return self.extractor.extract(html)
