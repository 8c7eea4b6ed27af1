"""Sentence-window chunking of article text."""

from newsrag.chunking.base import BaseChunker
from newsrag.chunking.schemas import Chunk, ChunkMetadata
from newsrag.chunking.sentence_chunker import SentenceChunker

__all__ = ["BaseChunker", "Chunk", "ChunkMetadata", "SentenceChunker"]
