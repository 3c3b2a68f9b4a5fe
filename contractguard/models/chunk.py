"""Chunk-level models used for embedding and retrieval."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TextChunk(BaseModel):
    """A token-bounded span of contract text ready for embedding."""

    model_config = ConfigDict(frozen=True)

    text: str
    index: int = Field(ge=0, description="Position in the document, 0-based.")
    token_count: int = Field(ge=0)
    hash: str = Field(description="SHA-256 hex digest of text, used for deduplication.")
