"""Document-level data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FileType(str, Enum):
    """Container formats accepted for upload."""

    PDF = "pdf"
    DOCX = "docx"


class ExtractionMethod(str, Enum):
    DIGITAL = "digital"
    OCR = "ocr"


class ExtractionResult(BaseModel):
    """Normalized text pulled out of an uploaded contract file."""

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int = Field(ge=0)
    method: ExtractionMethod
    word_count: int = Field(ge=0)
