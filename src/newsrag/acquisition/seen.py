"""Idempotency stores for already-ingested article links.

``MemorySeenStore`` lives as long as the process. ``SqliteSeenStore``
survives restarts and is the one to use for scheduled ingestion.
"""

from __future__ import annotations

import sqlite3
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit


def canonical_url(url: str) -> str:
    """Normalize a link so trivially different spellings dedup together."""
    parts = urlsplit(url.strip())
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((
        parts.scheme.lower(),
        parts.netloc.lower(),
        path,
        parts.query,
        "",
    ))


class SeenStore(ABC):
    """Interface for the set of links that must not be processed again."""

    @abstractmethod
    def contains(self, url: str) -> bool:
        """Return True if ``url`` was already processed."""

    @abstractmethod
    def add(self, url: str) -> None:
        """Record ``url`` as processed."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of recorded links."""

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.contains(url)

    def __len__(self) -> int:
        return self.count()


class MemorySeenStore(SeenStore):
    """Process-lifetime set of canonical links."""

    def __init__(self) -> None:
        self._urls: set[str] = set()
        self._lock = threading.Lock()

    def contains(self, url: str) -> bool:
        with self._lock:
            return canonical_url(url) in self._urls

    def add(self, url: str) -> None:
        with self._lock:
            self._urls.add(canonical_url(url))

    def count(self) -> int:
        with self._lock:
            return len(self._urls)


class SqliteSeenStore(SeenStore):
    """SQLite-backed link store keyed by canonical URL."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS seen_links (
                    url TEXT PRIMARY KEY,
                    first_seen TEXT NOT NULL
                )
            """)
            conn.commit()

    def contains(self, url: str) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT 1 FROM seen_links WHERE url = ?",
                (canonical_url(url),),
            ).fetchone()
            return row is not None

    def add(self, url: str) -> None:
        with self._conn() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO seen_links (url, first_seen) VALUES (?, ?)",
                (canonical_url(url), datetime.now(UTC).isoformat()),
            )
            conn.commit()

    def count(self) -> int:
        with self._conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM seen_links").fetchone()[0]
