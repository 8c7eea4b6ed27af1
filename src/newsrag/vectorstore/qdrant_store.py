"""Qdrant vector store — production backend with native payload filtering.

Supports Qdrant Cloud, self-hosted servers, on-disk local mode and an
in-memory mode for tests.
"""

from __future__ import annotations

import logging
from typing import Any

from qdrant_client import QdrantClient, models

from newsrag.errors import SearchFailure
from newsrag.vectorstore.base import VectorStore
from newsrag.vectorstore.schemas import (
    SearchFilter,
    SearchResult,
    VectorRecord,
    payload_to_metadata,
    record_to_payload,
)

logger = logging.getLogger(__name__)


class QdrantStore(VectorStore):
    """Qdrant-backed vector store."""

    def __init__(
        self,
        collection_name: str = "news_articles",
        dimension: int = 768,
        url: str | None = None,
        api_key: str | None = None,
        path: str | None = None,
        timeout: int = 30,
    ):
        self._collection_name = collection_name
        self._dimension = dimension

        if url:
            self._client = QdrantClient(url=url, api_key=api_key, timeout=timeout)
        elif path:
            self._client = QdrantClient(path=path)
        else:
            # In-memory for testing
            self._client = QdrantClient(":memory:")

        collections = [c.name for c in self._client.get_collections().collections]
        if collection_name not in collections:
            self._create_collection()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        points = [
            models.PointStruct(
                id=record.id,
                vector=record.embedding,
                payload=record_to_payload(record),
            )
            for record in records
        ]
        self._client.upsert(
            collection_name=self._collection_name,
            points=points,
            wait=True,
        )

        logger.info("QdrantStore upserted %d records", len(records))
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        search_filter: SearchFilter | None = None,
    ) -> list[SearchResult]:
        try:
            response = self._client.query_points(
                collection_name=self._collection_name,
                query=query_embedding,
                limit=top_k,
                query_filter=self.build_filter(search_filter),
                with_payload=True,
            )
        except Exception as exc:
            raise SearchFailure(f"Qdrant search failed: {exc}") from exc

        results: list[SearchResult] = []
        for point in response.points:
            payload: dict[str, Any] = point.payload or {}
            results.append(SearchResult(
                id=str(point.id),
                text=payload.get("text", ""),
                score=point.score if point.score is not None else 0.0,
                metadata=payload_to_metadata(payload),
                chunk_index=payload.get("chunk_index", 0),
            ))
        return results

    def count(self) -> int:
        info = self._client.get_collection(self._collection_name)
        return info.points_count or 0

    def clear(self) -> None:
        self._client.delete_collection(self._collection_name)
        self._create_collection()

    def close(self) -> None:
        # A local on-disk client holds a lock on its folder until closed
        self._client.close()

    @staticmethod
    def build_filter(search_filter: SearchFilter | None) -> models.Filter | None:
        """Translate a ``SearchFilter`` into Qdrant ``must`` conditions."""
        if search_filter is None or search_filter.is_empty():
            return None

        conditions: list[models.Condition] = []
        if search_filter.source:
            conditions.append(models.FieldCondition(
                key="source",
                match=models.MatchValue(value=search_filter.source),
            ))
        if search_filter.category:
            conditions.append(models.FieldCondition(
                key="categories",
                match=models.MatchAny(any=[search_filter.category]),
            ))
        if search_filter.date_from or search_filter.date_to:
            conditions.append(models.FieldCondition(
                key="pub_date",
                range=models.DatetimeRange(
                    gte=search_filter.date_from,
                    lte=search_filter.date_to,
                ),
            ))
        return models.Filter(must=conditions)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _create_collection(self) -> None:
        self._client.create_collection(
            collection_name=self._collection_name,
            vectors_config=models.VectorParams(
                size=self._dimension,
                distance=models.Distance.COSINE,
            ),
        )
        self._client.create_payload_index(
            collection_name=self._collection_name,
            field_name="source",
            field_schema=models.PayloadSchemaType.KEYWORD,
        )
        self._client.create_payload_index(
            collection_name=self._collection_name,
            field_name="pub_date",
            field_schema=models.PayloadSchemaType.DATETIME,
        )
        logger.info(
            "Created Qdrant collection '%s' (dim=%d)",
            self._collection_name, self._dimension,
        )
