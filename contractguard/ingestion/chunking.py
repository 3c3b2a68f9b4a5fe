"""Split contract text into overlapping, token-bounded chunks."""

from __future__ import annotations

import hashlib
import logging
import re
from typing import List, Optional, Tuple

from contractguard.config import settings
from contractguard.models.chunk import TextChunk
from contractguard.utils.tokenization import Tokenizer, count_tokens

logger = logging.getLogger(__name__)

__all__ = ["Chunker", "chunk_text", "count_tokens", "split_sentences"]

PARAGRAPH_SEPARATOR = "\n\n"
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n{2,}")
SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?])\s+(?=[A-Z\"'“‘])")


def split_sentences(text: str) -> List[str]:
    """Split text at sentence ends and paragraph breaks.

    A sentence that opens a new paragraph keeps a leading blank line so the
    paragraph boundary survives reassembly.
    """
    sentences: List[str] = []
    for paragraph in PARAGRAPH_BREAK_PATTERN.split(text):
        pieces = [piece.strip() for piece in SENTENCE_BOUNDARY_PATTERN.split(paragraph)]
        pieces = [piece for piece in pieces if piece]
        if not pieces:
            continue
        if sentences:
            pieces[0] = PARAGRAPH_SEPARATOR + pieces[0]
        sentences.extend(pieces)
    return sentences


def join_sentences(sentences: List[str]) -> str:
    parts: List[str] = []
    for sentence in sentences:
        if parts and not sentence.startswith(PARAGRAPH_SEPARATOR):
            parts.append(" ")
        parts.append(sentence)
    return "".join(parts).strip()


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def build_chunk(sentences: List[str], index: int, token_count: int) -> Optional[TextChunk]:
    text = join_sentences(sentences)
    if not text:
        return None
    return TextChunk(text=text, index=index, token_count=token_count, hash=hash_text(text))


class Chunker:
    """Sentence-granular sliding window over a token budget."""

    def __init__(
        self,
        tokenizer: Optional[Tokenizer] = None,
        chunk_size: Optional[int] = None,
        overlap_tokens: Optional[int] = None,
    ) -> None:
        self._tokenizer = tokenizer
        self.chunk_size = settings.chunk_token_size if chunk_size is None else chunk_size
        self.overlap_tokens = (
            settings.chunk_overlap_tokens if overlap_tokens is None else overlap_tokens
        )

    @property
    def tokenizer(self) -> Tokenizer:
        if self._tokenizer is None:
            self._tokenizer = Tokenizer.default()
        return self._tokenizer

    def build_overlap(
        self, sentences: List[str], counts: List[int], incoming: int
    ) -> Tuple[List[str], List[int]]:
        """Return the trailing sentences to carry into the next chunk.

        The overlap stays within ``overlap_tokens`` and leaves room for the
        incoming sentence inside ``chunk_size``.
        """
        # Overlap plus the incoming sentence must fit in chunk_size.
        budget = min(self.overlap_tokens, self.chunk_size - incoming)
        kept_sentences: List[str] = []
        kept_counts: List[int] = []
        total = 0
        for sentence, count in zip(reversed(sentences), reversed(counts)):
            if total + count > budget:
                break
            kept_sentences.insert(0, sentence)
            kept_counts.insert(0, count)
            total += count
        return kept_sentences, kept_counts

    def chunk(self, text: str) -> List[TextChunk]:
        if not text.strip():
            return []
        logger.debug("Starting text chunking (%s characters)", len(text))

        tokenizer = self.tokenizer
        chunks: List[TextChunk] = []
        buffer: List[str] = []
        counts: List[int] = []
        current_tokens = 0

        def flush_buffer() -> None:
            chunk = build_chunk(buffer, len(chunks), current_tokens)
            if chunk:
                chunks.append(chunk)

        for sentence in split_sentences(text):
            sentence_tokens = tokenizer.count(sentence)
            if buffer and current_tokens + sentence_tokens > self.chunk_size:
                flush_buffer()
                buffer, counts = self.build_overlap(buffer, counts, sentence_tokens)
                current_tokens = sum(counts)
            buffer.append(sentence)
            counts.append(sentence_tokens)
            current_tokens += sentence_tokens

        if buffer:
            flush_buffer()

        average = sum(c.token_count for c in chunks) / max(len(chunks), 1)
        logger.info("Chunking complete (%s chunks, %.0f avg tokens)", len(chunks), average)
        return chunks


def chunk_text(text: str) -> List[TextChunk]:
    """Split text into overlapping chunks using the configured token budget."""
    return Chunker().chunk(text)
