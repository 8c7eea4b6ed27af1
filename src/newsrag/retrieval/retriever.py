"""Retriever — embed query, search vector store, drop weak matches."""

from __future__ import annotations

import logging

from newsrag.embeddings.batcher import EmbeddingBatcher
from newsrag.errors import NewsRagError, SearchFailure
from newsrag.retrieval.schemas import ArticleHit, RetrievalConfig, RetrievalResult
from newsrag.vectorstore.base import VectorStore
from newsrag.vectorstore.schemas import SearchFilter, SearchResult

logger = logging.getLogger(__name__)

ARTICLE_SEARCH_CANDIDATES = 20
ARTICLE_SEARCH_LIMIT = 10


class Retriever:
    """Orchestrates query embedding → search → threshold filter."""

    def __init__(self, batcher: EmbeddingBatcher, vector_store: VectorStore):
        self.batcher = batcher
        self.vector_store = vector_store

    def retrieve(
        self,
        query: str,
        config: RetrievalConfig | None = None,
    ) -> RetrievalResult:
        """Run a full retrieval.

        Raises:
            EmbeddingFailure: If the query cannot be embedded.
            SearchFailure: If the vector index is unreachable.
        """
        cfg = config or RetrievalConfig()
        return self.search(query, self.embed_query(query), cfg)

    def embed_query(self, query: str) -> list[float]:
        return self.batcher.embed_query(query)

    def search(
        self,
        query: str,
        query_embedding: list[float],
        config: RetrievalConfig | None = None,
    ) -> RetrievalResult:
        """Search with a precomputed query vector and apply the threshold."""
        cfg = config or RetrievalConfig()
        raw_results = self._search(query_embedding, cfg.top_k, cfg.search_filter)

        relevant = [r for r in raw_results if r.score >= cfg.similarity_threshold]

        logger.info(
            "Retrieved %d/%d chunks above threshold %.2f",
            len(relevant), len(raw_results), cfg.similarity_threshold,
        )
        return RetrievalResult(
            query=query,
            results=relevant,
            total_candidates=len(raw_results),
        )

    def search_articles(
        self,
        query: str,
        search_filter: SearchFilter | None = None,
    ) -> list[ArticleHit]:
        """Article-level search: group chunk hits by URL, best score wins."""
        query_embedding = self.batcher.embed_query(query)
        hits = self._search(query_embedding, ARTICLE_SEARCH_CANDIDATES, search_filter)

        articles: dict[str, ArticleHit] = {}
        for hit in hits:
            meta = hit.metadata
            current = articles.get(meta.url)
            if current is None:
                articles[meta.url] = ArticleHit(
                    title=meta.title,
                    url=meta.url,
                    source=meta.source,
                    pub_date=meta.pub_date,
                    score=hit.score,
                )
            else:
                current.score = max(current.score, hit.score)
                current.chunk_count += 1

        ranked = sorted(articles.values(), key=lambda a: a.score, reverse=True)
        return ranked[:ARTICLE_SEARCH_LIMIT]

    def _search(
        self,
        query_embedding: list[float],
        top_k: int,
        search_filter: SearchFilter | None,
    ) -> list[SearchResult]:
        try:
            return self.vector_store.search(
                query_embedding=query_embedding,
                top_k=top_k,
                search_filter=search_filter,
            )
        except NewsRagError:
            raise
        except Exception as exc:
            raise SearchFailure(f"Vector search failed: {exc}") from exc
