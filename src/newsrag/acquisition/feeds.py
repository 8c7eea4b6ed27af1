"""RSS/Atom feed fetching and entry parsing."""

from __future__ import annotations

import calendar
import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

import feedparser
import httpx

from newsrag.acquisition.schemas import FeedEntry
from newsrag.errors import FetchFailure

logger = logging.getLogger(__name__)

_SOURCE_NAMES = {
    "reuters.com": "Reuters",
    "cnn.com": "CNN",
    "bbci.co.uk": "BBC",
    "theguardian.com": "The Guardian",
    "npr.org": "NPR",
}


def source_name(feed_url: str) -> str:
    """Map a feed URL to a publisher name."""
    for domain, name in _SOURCE_NAMES.items():
        if domain in feed_url:
            return name

    host = urlsplit(feed_url).hostname
    if not host:
        return "Unknown Source"
    return host.removeprefix("www.")


def parse_feed(content: bytes | str, feed_url: str = "") -> list[FeedEntry]:
    """Parse feed XML into entries.

    Raises:
        FetchFailure: If the payload is not a recognisable feed.
    """
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        reason = str(parsed.get("bozo_exception", "invalid feed format"))
        raise FetchFailure(feed_url, reason)
    if not parsed.get("version") and not parsed.entries:
        raise FetchFailure(feed_url, "invalid feed format")

    entries = []
    for raw in parsed.entries:
        entry = _to_entry(raw)
        if entry.link:
            entries.append(entry)
    return entries


def _to_entry(raw: Any) -> FeedEntry:
    link = raw.get("link") or raw.get("id") or ""
    categories = [t.get("term") for t in raw.get("tags", []) if t.get("term")]
    return FeedEntry(
        title=(raw.get("title") or "").strip(),
        link=link.strip(),
        description=raw.get("description") or raw.get("summary") or "",
        pub_date=_entry_date(raw),
        author=raw.get("author") or raw.get("dc_creator") or "",
        categories=categories,
    )


def _entry_date(raw: Any) -> str:
    struct = raw.get("published_parsed") or raw.get("updated_parsed")
    if struct:
        return datetime.fromtimestamp(calendar.timegm(struct), tz=UTC).isoformat()
    return datetime.now(UTC).isoformat()


class FeedReader:
    """Download feeds and article pages with bounded timeouts."""

    def __init__(
        self,
        user_agent: str = "Mozilla/5.0 (compatible; NewsBot/1.0)",
        feed_timeout: float = 15.0,
        article_timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.feed_timeout = feed_timeout
        self.article_timeout = article_timeout
        self._client = client or httpx.Client(follow_redirects=True)
        self._headers = {"User-Agent": user_agent}

    def fetch_entries(self, feed_url: str) -> list[FeedEntry]:
        """Fetch and parse one feed."""
        content = self._get(feed_url, self.feed_timeout).content
        return parse_feed(content, feed_url)

    def fetch_page(self, url: str) -> str:
        """Fetch an article page as text."""
        return self._get(url, self.article_timeout).text

    def close(self) -> None:
        self._client.close()

    def _get(self, url: str, timeout: float) -> httpx.Response:
        try:
            resp = self._client.get(url, headers=self._headers, timeout=timeout)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchFailure(url, str(exc)) from exc
        return resp
