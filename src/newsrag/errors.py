"""Failure taxonomy shared by the ingestion and query paths.

Ingestion-time failures (fetch, embedding of a single chunk) are absorbed
locally and logged. Query-time failures other than the two classified
generation outcomes propagate to the caller.
"""

from __future__ import annotations


class NewsRagError(Exception):
    """Base class for all pipeline errors."""


class FetchFailure(NewsRagError):
    """A feed or article page was unreachable or malformed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class EmbeddingFailure(NewsRagError):
    """The embedding provider kept failing after all retry attempts."""

    def __init__(self, source: str, attempts: int, reason: str = ""):
        msg = f"Failed to embed '{source}' after {attempts} attempts"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.source = source
        self.attempts = attempts


class SearchFailure(NewsRagError):
    """The vector index could not be searched."""


class GenerationFailure(NewsRagError):
    """The generative model did not produce a usable answer."""


class SafetyBlocked(GenerationFailure):
    """The provider refused the prompt on safety grounds."""


class QuotaExceeded(GenerationFailure):
    """The provider rejected the call for rate or quota reasons."""


class LogFailure(NewsRagError):
    """The interaction log sink rejected a record."""
