"""FAISS vector store — local, zero infrastructure.

Uses an inner-product index over L2-normalized vectors (cosine similarity)
with a parallel record dict for payload filtering.
"""

from __future__ import annotations

import logging

import numpy as np

from newsrag.vectorstore.base import VectorStore
from newsrag.vectorstore.schemas import SearchFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)


class FAISSStore(VectorStore):
    """FAISS-backed vector store with payload filtering."""

    def __init__(self, dimension: int = 768):
        try:
            import faiss
        except ImportError as exc:
            raise ImportError(
                "faiss-cpu required: pip install newsfeed-rag[faiss]"
            ) from exc

        self._faiss = faiss
        self._dimension = dimension
        self._index = self._new_index()
        self._records: dict[int, VectorRecord] = {}  # int id -> record
        self._int_ids: dict[str, int] = {}  # record id -> int id
        self._next_id = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        replaced = [self._int_ids[r.id] for r in records if r.id in self._int_ids]
        if replaced:
            self._index.remove_ids(np.array(replaced, dtype=np.int64))

        int_ids = []
        for record in records:
            int_id = self._int_ids.get(record.id)
            if int_id is None:
                int_id = self._next_id
                self._next_id += 1
                self._int_ids[record.id] = int_id
            self._records[int_id] = record
            int_ids.append(int_id)

        vectors = np.array([r.embedding for r in records], dtype=np.float32)
        # L2-normalize for cosine similarity via inner product
        self._faiss.normalize_L2(vectors)
        self._index.add_with_ids(vectors, np.array(int_ids, dtype=np.int64))

        logger.info("FAISSStore upserted %d records (total: %d)", len(records), self.count())
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        search_filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        if self._index.ntotal == 0:
            return []

        query_vec = np.array([query_embedding], dtype=np.float32)
        self._faiss.normalize_L2(query_vec)

        filtering = search_filter is not None and not search_filter.is_empty()
        # Over-fetch if filtering to ensure enough results after filtering
        fetch_k = self._index.ntotal if filtering else min(top_k, self._index.ntotal)

        scores, indices = self._index.search(query_vec, fetch_k)

        results: list[SearchResult] = []
        for score, idx in zip(scores[0], indices[0], strict=True):
            if idx == -1:
                continue
            record = self._records.get(int(idx))
            if record is None:
                continue
            if filtering and not search_filter.matches(record.metadata):
                continue

            results.append(SearchResult(
                id=record.id,
                text=record.text,
                score=float(score),
                metadata=record.metadata,
                chunk_index=record.chunk_index,
            ))
            if len(results) >= top_k:
                break

        return results

    def count(self) -> int:
        return self._index.ntotal

    def clear(self) -> None:
        self._index = self._new_index()
        self._records.clear()
        self._int_ids.clear()
        self._next_id = 0

    def _new_index(self):
        return self._faiss.IndexIDMap2(self._faiss.IndexFlatIP(self._dimension))
