"""Tests for vector store backends — FAISS and in-memory Qdrant, no network."""

from __future__ import annotations

import uuid

import pytest
from qdrant_client import models

from newsrag.chunking.schemas import ChunkMetadata
from newsrag.vectorstore.factory import available_stores, get_vector_store
from newsrag.vectorstore.faiss_store import FAISSStore
from newsrag.vectorstore.qdrant_store import QdrantStore
from newsrag.vectorstore.schemas import (
    SearchFilter,
    VectorRecord,
    payload_to_metadata,
    record_to_payload,
)

DIM = 4


def _record(
    n: int,
    vector: list[float],
    source: str = "BBC",
    pub_date: str = "2024-05-06T09:30:00+00:00",
    categories: tuple[str, ...] = ("World",),
) -> VectorRecord:
    url = f"https://news.example.com/{n}"
    return VectorRecord(
        id=str(uuid.uuid5(uuid.NAMESPACE_URL, url)),
        text=f"Chunk text {n}",
        embedding=vector,
        metadata=ChunkMetadata(
            article_id=f"article-{n}",
            title=f"Story {n}",
            url=url,
            source=source,
            pub_date=pub_date,
            categories=categories,
        ),
        chunk_index=0,
    )


@pytest.fixture
def records() -> list[VectorRecord]:
    return [
        _record(0, [1.0, 0.0, 0.0, 0.0], source="BBC", pub_date="2024-05-01T08:00:00+00:00"),
        _record(1, [0.9, 0.1, 0.0, 0.0], source="NPR", pub_date="2024-05-03T08:00:00+00:00",
                categories=("Politics",)),
        _record(2, [0.0, 1.0, 0.0, 0.0], source="BBC", pub_date="2024-05-05T08:00:00+00:00"),
    ]


QUERY = [1.0, 0.0, 0.0, 0.0]

# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class TestSchemas:
    def test_payload_round_trip_keeps_metadata(self, records):
        payload = record_to_payload(records[1])
        assert payload["article_url"] == "https://news.example.com/1"
        assert payload["categories"] == ["Politics"]
        assert payload_to_metadata(payload) == records[1].metadata

    def test_filter_matching(self, records):
        meta = records[1].metadata
        assert SearchFilter().is_empty()
        assert SearchFilter(source="NPR").matches(meta)
        assert not SearchFilter(source="BBC").matches(meta)
        assert SearchFilter(category="Politics").matches(meta)
        assert SearchFilter(date_from="2024-05-02", date_to="2024-05-04").matches(meta)
        assert not SearchFilter(date_from="2024-05-04T00:00:00Z").matches(meta)


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


@pytest.fixture(params=["faiss", "qdrant"])
def store(request):
    if request.param == "faiss":
        pytest.importorskip("faiss")
        return FAISSStore(dimension=DIM)
    return QdrantStore(collection_name=f"test_{uuid.uuid4().hex[:8]}", dimension=DIM)


class TestVectorStores:
    def test_search_ranks_by_similarity(self, store, records):
        store.upsert(records)
        results = store.search(QUERY, top_k=3)
        assert [r.metadata.url for r in results] == [
            "https://news.example.com/0",
            "https://news.example.com/1",
            "https://news.example.com/2",
        ]
        assert results[0].score == pytest.approx(1.0, abs=1e-4)
        assert results[0].score >= results[1].score >= results[2].score

    def test_results_carry_payload(self, store, records):
        store.upsert(records)
        top = store.search(QUERY, top_k=1)[0]
        assert top.text == "Chunk text 0"
        assert top.metadata == records[0].metadata

    def test_upsert_replaces_by_id(self, store, records):
        store.upsert(records)
        store.upsert([records[0]])
        assert store.count() == 3

    def test_filter_by_source(self, store, records):
        store.upsert(records)
        results = store.search(QUERY, top_k=5, search_filter=SearchFilter(source="BBC"))
        assert {r.metadata.source for r in results} == {"BBC"}
        assert len(results) == 2

    def test_filter_by_category(self, store, records):
        store.upsert(records)
        results = store.search(QUERY, top_k=5, search_filter=SearchFilter(category="Politics"))
        assert [r.metadata.url for r in results] == ["https://news.example.com/1"]

    def test_filter_by_date_range(self, store, records):
        store.upsert(records)
        results = store.search(QUERY, top_k=5, search_filter=SearchFilter(
            date_from="2024-05-02T00:00:00+00:00",
        ))
        assert {r.metadata.url for r in results} == {
            "https://news.example.com/1",
            "https://news.example.com/2",
        }

    def test_clear(self, store, records):
        store.upsert(records)
        store.clear()
        assert store.count() == 0
        assert store.search(QUERY) == []

    def test_upsert_empty(self, store):
        assert store.upsert([]) == 0


# ---------------------------------------------------------------------------
# Qdrant specifics
# ---------------------------------------------------------------------------


class TestQdrantFilter:
    def test_no_filter(self):
        assert QdrantStore.build_filter(None) is None
        assert QdrantStore.build_filter(SearchFilter()) is None

    def test_conditions(self):
        built = QdrantStore.build_filter(SearchFilter(
            source="BBC", category="World", date_to="2024-05-06T00:00:00+00:00",
        ))
        keys = [c.key for c in built.must]
        assert keys == ["source", "categories", "pub_date"]
        assert isinstance(built.must[0].match, models.MatchValue)
        assert isinstance(built.must[1].match, models.MatchAny)
        assert isinstance(built.must[2].range, models.DatetimeRange)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestVectorStoreFactory:
    def test_available_stores(self):
        assert available_stores() == ["qdrant", "faiss"]

    def test_unknown_store_raises(self):
        with pytest.raises(ValueError, match="Unknown vector store"):
            get_vector_store("nonexistent")

    def test_creates_in_memory_qdrant(self):
        store = get_vector_store("qdrant", collection_name="factory_test", dimension=DIM)
        assert isinstance(store, QdrantStore)
        assert store.count() == 0
