"""Main-content extraction from article HTML.

Strips page chrome first, then tries a ranked list of CSS selectors and
falls back to the whole ``<body>`` when no selector yields enough text.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Removed entirely (including their content) before extraction
REMOVE_SELECTORS = "script, style, nav, header, footer, aside, .advertisement, .ads"

# Tried in order; the first one producing enough text wins
CONTENT_SELECTORS = [
    "article",
    ".article-content",
    ".story-body",
    ".entry-content",
    ".post-content",
    ".content",
    "main",
]


class ContentExtractor:
    """Pull the visible article text out of an HTML page."""

    def __init__(
        self,
        min_selector_chars: int = 200,
        min_content_chars: int = 100,
        selectors: list[str] | None = None,
    ):
        self.min_selector_chars = min_selector_chars
        self.min_content_chars = min_content_chars
        self.selectors = selectors or list(CONTENT_SELECTORS)

    def extract(self, html: str) -> str | None:
        """Return the main text of ``html``, or ``None`` if too little survives."""
        soup = BeautifulSoup(html, "html.parser")

        for tag in soup.select(REMOVE_SELECTORS):
            tag.decompose()

        content = ""
        for selector in self.selectors:
            elements = soup.select(selector)
            if not elements:
                continue
            content = " ".join(el.get_text(" ") for el in elements).strip()
            if len(content) > self.min_selector_chars:
                break

        if len(content) < self.min_selector_chars:
            body = soup.body or soup
            content = body.get_text(" ").strip()

        if len(content) <= self.min_content_chars:
            logger.debug("Extraction yielded only %d chars", len(content))
            return None
        return content
