"""Shared fixtures for tests — synthetic feeds and articles, no network calls."""

from __future__ import annotations

import hashlib
import textwrap
from collections.abc import Callable, Iterator

import httpx
import numpy as np
import pytest

from newsrag.acquisition.schemas import Article
from newsrag.chunking.schemas import ChunkMetadata
from newsrag.embeddings.base import EmbeddingProvider
from newsrag.llm.base import LLMProvider

DIM = 64

# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------


class MockEmbedder(EmbeddingProvider):
    """Deterministic hash embeddings; counts calls."""

    def __init__(self, dim: int = DIM):
        self._dim = dim
        self.calls: list[str] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [self._hash_embed(t) for t in texts]

    def embed_query(self, query: str) -> list[float]:
        self.calls.append(query)
        return self._hash_embed(query)

    @property
    def dimension(self) -> int:
        return self._dim

    def _hash_embed(self, text: str) -> list[float]:
        h = hashlib.sha256(text.encode()).digest()
        vec = np.array([h[i % len(h)] / 255.0 for i in range(self._dim)], dtype=np.float32)
        vec /= np.linalg.norm(vec)
        return vec.tolist()


class MockLLM(LLMProvider):
    """Scripted LLM that records prompts."""

    def __init__(self, answer: str = "Leaders agreed on a ceasefire.", fragments=None):
        self.model = "mock-llm"
        self.answer = answer
        self.fragments = fragments or ["Leaders agreed", " on a ceasefire."]
        self.prompts: list[str] = []

    def generate(self, prompt: str, system: str | None = None) -> str:
        self.prompts.append(prompt)
        return self.answer

    def stream(self, prompt: str, system: str | None = None) -> Iterator[str]:
        self.prompts.append(prompt)
        yield from self.fragments


@pytest.fixture
def embedder() -> MockEmbedder:
    return MockEmbedder()


@pytest.fixture
def llm() -> MockLLM:
    return MockLLM()


# ---------------------------------------------------------------------------
# Synthetic content
# ---------------------------------------------------------------------------


@pytest.fixture
def article_text() -> str:
    return (
        "World leaders gathered in Geneva on Monday for emergency talks on the conflict. "
        "The meeting was called after a week of escalating violence in the border region. "
        "Diplomats from twelve countries attended the closed-door session. "
        "Officials said the talks focused on humanitarian access and a possible ceasefire. "
        "Aid agencies have warned that supplies of food and medicine are running low. "
        "The United Nations secretary general urged all parties to show restraint. "
        "A joint statement is expected to be released later in the week. "
        "Markets reacted cautiously to the news, with oil prices rising slightly. "
        "Analysts said a durable agreement would require guarantees from neighbouring states. "
        "Protesters gathered outside the venue calling for an immediate end to the fighting. "
        "Police said the demonstrations were largely peaceful. "
        "The next round of talks is scheduled for early next month."
    )


@pytest.fixture
def chunk_metadata() -> ChunkMetadata:
    return ChunkMetadata(
        article_id="article-1",
        title="Leaders meet in Geneva",
        url="https://www.bbc.co.uk/news/world-1",
        source="BBC",
        pub_date="2024-05-06T09:30:00+00:00",
        author="Jane Reporter",
        categories=("World", "Europe"),
    )


@pytest.fixture
def make_article(article_text: str) -> Callable[..., Article]:
    def _make(url: str = "https://www.bbc.co.uk/news/world-1", **overrides) -> Article:
        fields = {
            "id": f"id-{url}",
            "title": "Leaders meet in Geneva",
            "url": url,
            "content": article_text,
            "source": "BBC",
            "author": "Jane Reporter",
            "pub_date": "2024-05-06T09:30:00+00:00",
            "categories": ["World"],
        }
        fields.update(overrides)
        return Article(**fields)

    return _make


def rss_feed(links: list[str]) -> str:
    """Build an RSS 2.0 document with one item per link."""
    items = "".join(
        textwrap.dedent(f"""\
            <item>
              <title>Story {i}</title>
              <link>{link}</link>
              <description>Short summary of story {i}.</description>
              <pubDate>Mon, 06 May 2024 09:30:00 GMT</pubDate>
              <category>World</category>
            </item>
        """)
        for i, link in enumerate(links)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0"><channel><title>Test feed</title>'
        "<link>https://example.com</link><description>Test</description>"
        f"{items}</channel></rss>"
    )


def article_html(body: str) -> str:
    return (
        "<html><head><title>Story</title><script>var tracking = 1;</script></head>"
        "<body><nav>Home | World | Business</nav>"
        f"<article><p>{body}</p></article>"
        "<footer>Copyright 2024</footer></body></html>"
    )


@pytest.fixture
def feed_client(article_text: str) -> Callable[..., httpx.Client]:
    """Build an ``httpx.Client`` serving feeds and article pages from dicts."""

    def _make(feeds: dict[str, str], pages: dict[str, str] | None = None) -> httpx.Client:
        pages = pages or {}
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            url = str(request.url)
            if url in feeds:
                return httpx.Response(200, text=feeds[url])
            if url in pages:
                return httpx.Response(200, text=pages[url])
            if url.startswith("https://news.example.com/"):
                return httpx.Response(200, text=article_html(article_text))
            return httpx.Response(404, text="not found")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return _make
