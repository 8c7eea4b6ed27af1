"""Tests for feed fetching, content extraction, cleaning and link dedup."""

from __future__ import annotations

import sqlite3
import uuid

import pytest
from conftest import article_html, rss_feed

from newsrag.acquisition import seen as seen_module
from newsrag.acquisition.acquirer import ContentAcquirer
from newsrag.acquisition.extractor import ContentExtractor
from newsrag.acquisition.feeds import FeedReader, parse_feed, source_name
from newsrag.acquisition.sanitize import clean_text
from newsrag.acquisition.seen import MemorySeenStore, SqliteSeenStore, canonical_url
from newsrag.errors import FetchFailure
from newsrag.vectorstore.schemas import parse_timestamp

FEED_URL = "https://feeds.example.com/world.xml"

# ---------------------------------------------------------------------------
# Source naming
# ---------------------------------------------------------------------------


class TestSourceName:
    @pytest.mark.parametrize("url,expected", [
        ("https://feeds.bbci.co.uk/news/world/rss.xml", "BBC"),
        ("https://www.theguardian.com/world/rss", "The Guardian"),
        ("https://feeds.npr.org/1001/rss.xml", "NPR"),
        ("https://www.example.org/feed", "example.org"),
        ("not a url", "Unknown Source"),
    ])
    def test_mapping(self, url, expected):
        assert source_name(url) == expected


# ---------------------------------------------------------------------------
# Feed parsing
# ---------------------------------------------------------------------------


class TestParseFeed:
    def test_rss_entries(self):
        entries = parse_feed(rss_feed(["https://news.example.com/a"]), FEED_URL)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.title == "Story 0"
        assert entry.link == "https://news.example.com/a"
        assert entry.description == "Short summary of story 0."
        assert entry.categories == ["World"]
        assert parse_timestamp(entry.pub_date).isoformat() == "2024-05-06T09:30:00+00:00"

    def test_guid_and_creator_fallbacks(self):
        xml = (
            '<?xml version="1.0"?>'
            '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">'
            "<channel><title>t</title>"
            "<item><title>No link</title>"
            "<guid>https://news.example.com/guid-only</guid>"
            "<dc:creator>Sam Writer</dc:creator>"
            "</item></channel></rss>"
        )
        entries = parse_feed(xml, FEED_URL)
        assert entries[0].link == "https://news.example.com/guid-only"
        assert entries[0].author == "Sam Writer"

    def test_missing_date_defaults_to_now(self):
        xml = (
            '<?xml version="1.0"?><rss version="2.0"><channel><title>t</title>'
            "<item><title>Undated</title><link>https://news.example.com/u</link></item>"
            "</channel></rss>"
        )
        entry = parse_feed(xml, FEED_URL)[0]
        assert parse_timestamp(entry.pub_date).tzinfo is not None

    def test_invalid_feed_raises(self):
        with pytest.raises(FetchFailure) as exc_info:
            parse_feed("this is not a feed", FEED_URL)
        assert exc_info.value.url == FEED_URL


# ---------------------------------------------------------------------------
# Content extraction and cleaning
# ---------------------------------------------------------------------------


class TestContentExtractor:
    def test_article_selector_strips_chrome(self, article_text):
        text = ContentExtractor().extract(article_html(article_text))
        assert text == article_text
        assert "tracking" not in text
        assert "Copyright" not in text

    def test_falls_back_to_body(self, article_text):
        html = (
            "<html><body><article>Too short.</article>"
            f"<div>{article_text}</div></body></html>"
        )
        text = ContentExtractor().extract(html)
        assert text is not None
        assert article_text in text

    def test_discards_tiny_pages(self):
        html = "<html><body><article>Only a few words here.</article></body></html>"
        assert ContentExtractor().extract(html) is None


class TestCleanText:
    def test_strips_disallowed_and_collapses_whitespace(self):
        assert clean_text("Hello   <world> ©2024\n\nok") == "Hello world 2024 ok"

    def test_keeps_punctuation_and_unicode_letters(self):
        assert clean_text("Café (Paris): \"yes\" - it's open!") == "Café (Paris): \"yes\" - it's open!"

    def test_empty(self):
        assert clean_text(None) == ""
        assert clean_text("   ") == ""


# ---------------------------------------------------------------------------
# Seen-link stores
# ---------------------------------------------------------------------------


class TestSeenStores:
    def test_canonical_url(self):
        assert canonical_url("HTTPS://News.Example.com/a/#frag") == "https://news.example.com/a"
        assert canonical_url("https://news.example.com/a?id=1") == "https://news.example.com/a?id=1"

    def test_memory_store(self):
        store = MemorySeenStore()
        store.add("https://news.example.com/a/")
        assert "https://NEWS.example.com/a" in store
        assert len(store) == 1

    def test_sqlite_store_survives_reopen(self, tmp_path):
        db = str(tmp_path / "state" / "seen.db")
        store = SqliteSeenStore(db)
        store.add("https://news.example.com/a")
        store.add("https://news.example.com/a/")

        reopened = SqliteSeenStore(db)
        assert reopened.contains("https://NEWS.example.com/a")
        assert not reopened.contains("https://news.example.com/b")
        assert reopened.count() == 1

    def test_sqlite_store_closes_every_connection(self, tmp_path, monkeypatch):
        real_connect = sqlite3.connect
        opened = []

        class TrackedConnection:
            def __init__(self, path):
                self._conn = real_connect(path)
                self.closed = False
                opened.append(self)

            def execute(self, *args):
                return self._conn.execute(*args)

            def commit(self):
                self._conn.commit()

            def close(self):
                self.closed = True
                self._conn.close()

        monkeypatch.setattr(seen_module.sqlite3, "connect", TrackedConnection)
        store = SqliteSeenStore(str(tmp_path / "seen.db"))
        store.add("https://news.example.com/a")
        assert store.contains("https://news.example.com/a")
        assert store.count() == 1

        assert len(opened) == 4
        assert all(conn.closed for conn in opened)


# ---------------------------------------------------------------------------
# Feed reader
# ---------------------------------------------------------------------------


class TestFeedReader:
    def test_sends_user_agent(self, feed_client):
        client = feed_client({FEED_URL: rss_feed(["https://news.example.com/a"])})
        reader = FeedReader(user_agent="TestBot/1.0", client=client)
        entries = reader.fetch_entries(FEED_URL)
        assert len(entries) == 1
        assert client.requests[0].headers["user-agent"] == "TestBot/1.0"

    def test_http_error_becomes_fetch_failure(self, feed_client):
        reader = FeedReader(client=feed_client({}))
        with pytest.raises(FetchFailure):
            reader.fetch_entries("https://feeds.example.com/missing.xml")


# ---------------------------------------------------------------------------
# Acquirer
# ---------------------------------------------------------------------------


class TestContentAcquirer:
    def _acquirer(self, client, feeds=None, seen=None, **kwargs) -> ContentAcquirer:
        return ContentAcquirer(
            feeds=feeds or [FEED_URL],
            reader=FeedReader(client=client),
            seen=seen or MemorySeenStore(),
            **kwargs,
        )

    def test_skips_already_seen_links(self, feed_client, article_text):
        links = [
            "https://news.example.com/a",
            "https://news.example.com/b",
            "https://news.example.com/c",
        ]
        seen = MemorySeenStore()
        seen.add(links[0])
        seen.add(links[1])

        acquirer = self._acquirer(feed_client({FEED_URL: rss_feed(links)}), seen=seen)
        articles = acquirer.acquire_all()

        assert len(articles) == 1
        article = articles[0]
        assert article.url == links[2]
        assert article.content == article_text
        assert article.source == "feeds.example.com"
        assert article.id == str(uuid.uuid5(uuid.NAMESPACE_URL, links[2]))

    def test_second_run_finds_nothing_new(self, feed_client):
        client = feed_client({FEED_URL: rss_feed(["https://news.example.com/a"])})
        acquirer = self._acquirer(client)
        assert len(acquirer.acquire_all()) == 1
        assert acquirer.acquire_all() == []

    def test_caps_entries_per_feed(self, feed_client):
        links = [f"https://news.example.com/{i}" for i in range(12)]
        acquirer = self._acquirer(feed_client({FEED_URL: rss_feed(links)}), max_entries_per_feed=10)
        assert len(acquirer.acquire_all()) == 10

    def test_failing_feed_is_isolated(self, feed_client):
        good = "https://feeds.example.com/good.xml"
        client = feed_client({good: rss_feed(["https://news.example.com/a"])})
        acquirer = self._acquirer(client, feeds=["https://feeds.example.com/broken.xml", good])
        articles = acquirer.acquire_all()
        assert [a.url for a in articles] == ["https://news.example.com/a"]

    def test_unreachable_page_falls_back_to_description(self, feed_client):
        link = "https://elsewhere.example.com/story"
        acquirer = self._acquirer(feed_client({FEED_URL: rss_feed([link])}))
        articles = acquirer.acquire_all()
        assert len(articles) == 1
        assert articles[0].content == "Short summary of story 0."

    def test_stats(self, feed_client):
        client = feed_client({FEED_URL: rss_feed(["https://news.example.com/a"])})
        acquirer = self._acquirer(client)
        assert acquirer.stats().last_ingestion is None

        acquirer.acquire_all()
        stats = acquirer.stats()
        assert stats.processed_articles == 1
        assert stats.sources == 1
        assert stats.last_ingestion is not None
