"""Turning uploaded files into chunk sequences."""

from .chunking import Chunker, chunk_text, count_tokens
from .extraction import TextExtractionEngine, extract_text, normalize_text

__all__ = [
    "Chunker",
    "TextExtractionEngine",
    "chunk_text",
    "count_tokens",
    "extract_text",
    "normalize_text",
]
