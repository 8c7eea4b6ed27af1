"""Embedding batcher — truncation, retry, and paced bounded-concurrency batches.

Every provider call goes through ``embed``: the text is cut to the
provider's input limit, the call is retried with linearly growing delay,
and the returned vector is checked against the index dimension. Batches
are split into fixed-size sub-batches that run on a small worker pool,
one sub-batch at a time with a pause in between.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    stop_after_attempt,
    wait_incrementing,
)

from newsrag.embeddings.base import EmbeddingProvider
from newsrag.errors import EmbeddingFailure

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TEMPLATE = "Question about recent news: {query}"


@dataclass
class BatchEmbedding:
    """Per-item outcome of a batch call.

    ``embeddings[i]`` is ``None`` exactly when item ``i`` failed; the
    matching ``EmbeddingFailure`` is in ``failures``.
    """

    embeddings: list[list[float] | None] = field(default_factory=list)
    failures: list[EmbeddingFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for e in self.embeddings if e is not None)


class EmbeddingBatcher:
    """Wrap an ``EmbeddingProvider`` with retry, truncation and batching."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        dimension: int | None = None,
        max_input_chars: int = 8000,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        batch_size: int = 10,
        max_concurrency: int = 5,
        batch_pause: float = 0.5,
        query_template: str = DEFAULT_QUERY_TEMPLATE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.dimension = dimension or provider.dimension
        self.max_input_chars = max_input_chars
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency
        self.batch_pause = batch_pause
        self.query_template = query_template
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed(self, text: str, source: str = "") -> list[float]:
        """Embed one passage.

        Raises:
            EmbeddingFailure: After ``max_attempts`` failed provider calls.
        """
        return self._with_retry(
            lambda t: self.provider.embed_texts([t])[0],
            text,
            source,
        )

    def embed_query(self, query: str) -> list[float]:
        """Embed a user question wrapped in the query template."""
        wrapped = self.query_template.format(query=query)
        return self._with_retry(self.provider.embed_query, wrapped, f"query: {query[:60]}")

    def embed_batch(
        self,
        texts: Sequence[str],
        sources: Sequence[str] | None = None,
    ) -> BatchEmbedding:
        """Embed many passages with per-item failure isolation."""
        result = BatchEmbedding()
        if not texts:
            return result

        labels = list(sources) if sources else [f"text #{i}" for i in range(len(texts))]
        total_batches = (len(texts) + self.batch_size - 1) // self.batch_size

        for batch_no, start in enumerate(range(0, len(texts), self.batch_size), 1):
            batch = list(texts[start : start + self.batch_size])
            batch_labels = labels[start : start + self.batch_size]
            self._run_sub_batch(batch, batch_labels, result)

            if batch_no < total_batches and self.batch_pause > 0:
                self._sleep(self.batch_pause)

        logger.info(
            "Embedded %d/%d texts in %d sub-batches",
            result.succeeded, len(texts), total_batches,
        )
        return result

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _run_sub_batch(
        self,
        batch: list[str],
        labels: list[str],
        result: BatchEmbedding,
    ) -> None:
        workers = max(1, min(self.max_concurrency, len(batch)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self.embed, text, label)
                for text, label in zip(batch, labels, strict=True)
            ]
            for future in futures:
                try:
                    result.embeddings.append(future.result())
                except EmbeddingFailure as exc:
                    logger.warning("%s", exc)
                    result.embeddings.append(None)
                    result.failures.append(exc)

    def _with_retry(
        self,
        call: Callable[[str], list[float]],
        text: str,
        source: str,
    ) -> list[float]:
        if not text or not text.strip():
            raise EmbeddingFailure(source, 0, "text cannot be empty")

        truncated = text[: self.max_input_chars]
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=False,
        )
        try:
            return retrying(self._checked, call, truncated)
        except RetryError as exc:
            attempt = exc.last_attempt
            last_error = attempt.exception()
            logger.warning("Embedding for %s failed after %d attempts", source, attempt.attempt_number)
            raise EmbeddingFailure(source, attempt.attempt_number, str(last_error)) from last_error

    def _checked(self, call: Callable[[str], list[float]], text: str) -> list[float]:
        vector = call(text)
        if len(vector) != self.dimension:
            raise ValueError(f"expected dimension {self.dimension}, got {len(vector)}")
        return vector
