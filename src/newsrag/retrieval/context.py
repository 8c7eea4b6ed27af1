"""Context window packing and source citation building.

Chunks are packed greedily in score order under a fixed character budget
that includes the preamble; the first chunk that does not fit ends the
packing. Citations are derived from the packed chunks only.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from newsrag.retrieval.schemas import ContextWindow, SourceCitation
from newsrag.vectorstore.schemas import SearchResult, parse_timestamp

logger = logging.getLogger(__name__)

CONTEXT_BUDGET = 4000
MAX_SOURCES = 5

PREAMBLE_TEMPLATE = "User Question: {query}\n\nRelevant News Information:\n\n"
CHUNK_TEMPLATE = "Source: {source} - {title}\nPublished: {date}\nContent: {text}\n\n"


def render_date(pub_date: str) -> str:
    """Render a stored ISO timestamp as a plain date."""
    if not pub_date:
        return "unknown date"
    try:
        return parse_timestamp(pub_date).date().isoformat()
    except ValueError:
        return pub_date


def render_chunk(chunk: SearchResult) -> str:
    meta = chunk.metadata
    return CHUNK_TEMPLATE.format(
        source=meta.source or "Unknown Source",
        title=meta.title,
        date=render_date(meta.pub_date),
        text=chunk.text,
    )


class ContextAssembler:
    """Pack retrieved chunks into a bounded context and cite their articles."""

    def __init__(self, budget: int = CONTEXT_BUDGET, max_sources: int = MAX_SOURCES):
        self.budget = budget
        self.max_sources = max_sources

    def assemble(self, query: str, chunks: Sequence[SearchResult]) -> ContextWindow:
        # sorted() is stable, so equal scores keep their search order
        ranked = sorted(chunks, key=lambda c: c.score, reverse=True)

        preamble = PREAMBLE_TEMPLATE.format(query=query)
        parts = [preamble]
        used: list[SearchResult] = []
        length = len(preamble)

        for chunk in ranked:
            rendered = render_chunk(chunk)
            if length + len(rendered) > self.budget:
                break
            parts.append(rendered)
            used.append(chunk)
            length += len(rendered)

        logger.debug("Packed %d/%d chunks into %d chars", len(used), len(ranked), length)
        return ContextWindow(text="".join(parts), chunks=used, length=length)

    def citations(self, chunks: Sequence[SearchResult]) -> list[SourceCitation]:
        """One citation per article URL, keeping the article's best score."""
        best: dict[str, SourceCitation] = {}
        for chunk in chunks:
            meta = chunk.metadata
            seen = best.get(meta.url)
            if seen is None or chunk.score > seen.score:
                best[meta.url] = SourceCitation(
                    title=meta.title,
                    url=meta.url,
                    source=meta.source,
                    pub_date=meta.pub_date,
                    score=chunk.score,
                )

        ranked = sorted(best.values(), key=lambda c: c.score, reverse=True)
        return ranked[: self.max_sources]
