"""Ingestion pipeline — article → chunk → embed → store.

``IngestPipeline`` handles the write path for already-acquired articles.
``IngestionJob`` pairs it with a ``ContentAcquirer`` and enforces that at
most one run executes at a time: a run triggered while another is in
progress is dropped, not queued.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import UTC, datetime

from newsrag.acquisition.acquirer import ContentAcquirer
from newsrag.acquisition.schemas import Article
from newsrag.chunking.base import BaseChunker
from newsrag.chunking.schemas import ChunkMetadata
from newsrag.chunking.sentence_chunker import SentenceChunker
from newsrag.embeddings.batcher import EmbeddingBatcher
from newsrag.pipeline.schemas import IngestionRun, IngestionStats, IngestResult
from newsrag.vectorstore.base import VectorStore
from newsrag.vectorstore.schemas import VectorRecord

logger = logging.getLogger(__name__)


class IngestPipeline:
    """Orchestrates article ingestion: chunk → embed → store."""

    def __init__(
        self,
        batcher: EmbeddingBatcher,
        vector_store: VectorStore,
        chunker: BaseChunker | None = None,
    ):
        self.batcher = batcher
        self.vector_store = vector_store
        self.chunker = chunker or SentenceChunker()

    def ingest_article(self, article: Article) -> IngestResult:
        """Chunk, embed and store one article.

        Chunks whose embedding failed after retries are dropped; their
        siblings are still stored.
        """
        meta = ChunkMetadata(
            article_id=article.id,
            title=article.title,
            url=article.url,
            source=article.source,
            pub_date=article.pub_date,
            author=article.author,
            categories=tuple(article.categories),
        )
        chunks = self.chunker.chunk(article.content, metadata=meta)
        if not chunks:
            logger.info("No chunks produced for %s", article.url)
            return IngestResult(
                source=article.url,
                chunks_created=0,
                chunks_embedded=0,
                chunks_stored=0,
            )

        labels = [f"{article.url} chunk {c.chunk_index}" for c in chunks]
        batch = self.batcher.embed_batch([c.text for c in chunks], labels)

        records = [
            VectorRecord(
                id=chunk.id,
                text=chunk.text,
                embedding=embedding,
                metadata=chunk.metadata,
                chunk_index=chunk.chunk_index,
            )
            for chunk, embedding in zip(chunks, batch.embeddings, strict=True)
            if embedding is not None
        ]
        stored = self.vector_store.upsert(records)

        logger.info(
            "Ingested %s: %d chunks → %d embedded → %d stored",
            article.url,
            len(chunks),
            batch.succeeded,
            stored,
        )
        return IngestResult(
            source=article.url,
            chunks_created=len(chunks),
            chunks_embedded=batch.succeeded,
            chunks_stored=stored,
            failures=list(batch.failures),
        )

    def ingest_articles(self, articles: Iterable[Article]) -> list[IngestResult]:
        """Ingest articles one by one; a failing article is logged and skipped."""
        results: list[IngestResult] = []
        for article in articles:
            try:
                results.append(self.ingest_article(article))
            except Exception:
                logger.warning("Failed to ingest %s", article.url, exc_info=True)
        return results


class IngestionJob:
    """Acquire new articles and ingest them, one run at a time."""

    def __init__(self, acquirer: ContentAcquirer, pipeline: IngestPipeline):
        self.acquirer = acquirer
        self.pipeline = pipeline
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = IngestionStats()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run(self, feeds: Iterable[str] | None = None) -> IngestionRun | None:
        """Execute one run; returns ``None`` if another run is in progress."""
        if not self._lock.acquire(blocking=False):
            logger.info("Ingestion already running, skipping this run")
            with self._stats_lock:
                self._stats.skipped_runs += 1
            return None

        with self._stats_lock:
            self._stats.total_runs += 1
        run = IngestionRun(started_at=datetime.now(UTC).isoformat())
        try:
            articles = self.acquirer.acquire_all(feeds)
            run.articles_acquired = len(articles)
            run.results = self.pipeline.ingest_articles(articles)
            run.articles_ingested = sum(1 for r in run.results if r.chunks_stored > 0)
            run.chunks_stored = sum(r.chunks_stored for r in run.results)
        except Exception:
            with self._stats_lock:
                self._stats.failed_runs += 1
            logger.exception("Ingestion run failed")
            raise
        else:
            with self._stats_lock:
                self._stats.successful_runs += 1
                self._stats.total_articles_processed += run.articles_acquired
        finally:
            run.finished_at = datetime.now(UTC).isoformat()
            with self._stats_lock:
                self._stats.last_run = run.finished_at
            self._lock.release()

        logger.info(
            "Ingestion run finished: %d articles acquired, %d ingested, %d chunks stored",
            run.articles_acquired,
            run.articles_ingested,
            run.chunks_stored,
        )
        return run

    def run_manual(self, feeds: Iterable[str] | None = None) -> IngestionRun | None:
        """Operator-triggered run; shares the single-run guard with ``run``."""
        logger.info("Manual ingestion triggered")
        return self.run(feeds)

    def stats(self) -> IngestionStats:
        with self._stats_lock:
            return IngestionStats(
                total_runs=self._stats.total_runs,
                successful_runs=self._stats.successful_runs,
                failed_runs=self._stats.failed_runs,
                skipped_runs=self._stats.skipped_runs,
                total_articles_processed=self._stats.total_articles_processed,
                last_run=self._stats.last_run,
                is_running=self.is_running,
            )
