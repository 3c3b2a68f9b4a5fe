"""Extract-then-chunk ingestion for uploaded contracts."""

from __future__ import annotations

import logging
from typing import Collection, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from contractguard.config import settings
from contractguard.errors import InsufficientContentError
from contractguard.ingestion.chunking import Chunker
from contractguard.ingestion.extraction import TextExtractionEngine
from contractguard.models.chunk import TextChunk
from contractguard.models.document import ExtractionResult, FileType

logger = logging.getLogger(__name__)


class IngestionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    extraction: ExtractionResult
    chunks: List[TextChunk]


def ingest_contract(
    buffer: bytes,
    file_type: Union[FileType, str],
    engine: Optional[TextExtractionEngine] = None,
    chunker: Optional[Chunker] = None,
    min_word_count: Optional[int] = None,
) -> IngestionResult:
    """Extract text from an uploaded file and split it into chunks.

    Raises :class:`InsufficientContentError` when the extracted text is too
    short to analyse; every other failure propagates from the stage that
    raised it.
    """
    minimum = settings.min_content_word_count if min_word_count is None else min_word_count
    extraction = (engine or TextExtractionEngine()).extract(buffer, file_type)
    if not extraction.text or extraction.word_count < minimum:
        raise InsufficientContentError(extraction.word_count, minimum)

    chunks = (chunker or Chunker()).chunk(extraction.text)
    logger.debug(
        "Ingested contract (method=%s, words=%s, chunks=%s)",
        extraction.method.value,
        extraction.word_count,
        len(chunks),
    )
    return IngestionResult(extraction=extraction, chunks=chunks)


def filter_new_chunks(chunks: Iterable[TextChunk], existing_hashes: Collection[str]) -> List[TextChunk]:
    """Drop chunks whose content hash is already stored downstream."""
    chunks = list(chunks)
    fresh = [chunk for chunk in chunks if chunk.hash not in existing_hashes]
    logger.debug(
        "Chunk deduplication complete (total=%s, existing=%s, new=%s)",
        len(chunks),
        len(existing_hashes),
        len(fresh),
    )
    return fresh


def select_chunks(chunks: Iterable[TextChunk], indexes: Iterable[int]) -> List[TextChunk]:
    """Keep only the chunks at the requested positions (incremental re-embedding)."""
    wanted = set(indexes)
    return [chunk for chunk in chunks if chunk.index in wanted]
