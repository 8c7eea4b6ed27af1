"""Sentence-window chunker for news articles.

Splits on sentence punctuation, packs whole sentences up to
``max_chunk_size`` characters and seeds each new chunk with the trailing
sentences of the previous one. Output depends only on the input text and
the constructor arguments.
"""

from __future__ import annotations

import logging
import re
import uuid

from newsrag.chunking.base import BaseChunker
from newsrag.chunking.schemas import Chunk, ChunkMetadata

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 500
OVERLAP_SENTENCES = 2
MIN_FINAL_CHUNK = 50
MIN_TEXT_LENGTH = 100

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def split_sentences(text: str) -> list[str]:
    """Split on runs of ``.``, ``!`` and ``?``; each sentence ends with a period."""
    return [s.strip() + "." for s in _SENTENCE_SPLIT.split(text) if s.strip()]


class SentenceChunker(BaseChunker):
    """Chunker that accumulates whole sentences with sentence overlap."""

    def __init__(
        self,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        overlap_sentences: int = OVERLAP_SENTENCES,
        min_final_chunk: int = MIN_FINAL_CHUNK,
        min_text_length: int = MIN_TEXT_LENGTH,
    ):
        self.max_chunk_size = max_chunk_size
        self.overlap_sentences = overlap_sentences
        self.min_final_chunk = min_final_chunk
        self.min_text_length = min_text_length

    def chunk(self, text: str, metadata: ChunkMetadata | None = None) -> list[Chunk]:
        meta = metadata or ChunkMetadata()
        if not text or len(text) < self.min_text_length:
            return []

        texts: list[str] = []
        buffer: list[str] = []

        for sentence in split_sentences(text):
            if buffer and _joined_length(buffer + [sentence]) > self.max_chunk_size:
                texts.append(" ".join(buffer))
                buffer = self._overlap(buffer, sentence)
            buffer.append(sentence)

        if buffer and _joined_length(buffer) > self.min_final_chunk:
            texts.append(" ".join(buffer))

        chunks = [
            Chunk(id=chunk_id(meta, i), text=t, metadata=meta, chunk_index=i)
            for i, t in enumerate(texts)
        ]
        logger.debug(
            "SentenceChunker produced %d chunks from %d chars",
            len(chunks), len(text),
        )
        return chunks

    def _overlap(self, previous: list[str], next_sentence: str) -> list[str]:
        # Oldest overlap sentence goes first when the seed would not fit
        if self.overlap_sentences <= 0:
            return []
        seed = previous[-self.overlap_sentences:]
        while seed and _joined_length(seed + [next_sentence]) > self.max_chunk_size:
            seed = seed[1:]
        return seed


def chunk_id(meta: ChunkMetadata, index: int) -> str:
    """Deterministic point id for the ``index``-th chunk of an article."""
    owner = meta.article_id or meta.url
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{owner}_chunk_{index}"))


def _joined_length(sentences: list[str]) -> int:
    return sum(len(s) for s in sentences) + max(len(sentences) - 1, 0)
