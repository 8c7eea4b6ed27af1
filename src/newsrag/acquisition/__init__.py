"""Content acquisition — feeds, article pages, cleaning, dedup."""

from newsrag.acquisition.acquirer import ContentAcquirer
from newsrag.acquisition.extractor import ContentExtractor
from newsrag.acquisition.feeds import FeedReader, parse_feed, source_name
from newsrag.acquisition.sanitize import clean_text
from newsrag.acquisition.schemas import AcquisitionStats, Article, FeedEntry
from newsrag.acquisition.seen import MemorySeenStore, SeenStore, SqliteSeenStore

__all__ = [
    "AcquisitionStats",
    "Article",
    "ContentAcquirer",
    "ContentExtractor",
    "FeedEntry",
    "FeedReader",
    "MemorySeenStore",
    "SeenStore",
    "SqliteSeenStore",
    "clean_text",
    "parse_feed",
    "source_name",
]
