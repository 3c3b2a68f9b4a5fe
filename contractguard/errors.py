"""Exceptions raised by the contract processing core."""

from __future__ import annotations


class ContractGuardError(Exception):
    """Base class for every error raised by this package."""


class ExtractionError(ContractGuardError):
    """Text could not be extracted from an uploaded file."""


class UnsupportedFileTypeError(ExtractionError):
    def __init__(self, file_type: object) -> None:
        super().__init__(f"Unsupported file type {file_type!r}; expected 'pdf' or 'docx'.")
        self.file_type = file_type


class DocxStructureError(ExtractionError):
    """The DOCX container is malformed or lacks its main document part."""


class OcrError(ExtractionError):
    """OCR was required but the engine is missing or failed."""


class InsufficientContentError(ExtractionError):
    def __init__(self, word_count: int, minimum: int) -> None:
        super().__init__(
            f"Text extraction yielded too little content ({word_count} words, "
            f"minimum {minimum}). The file may be corrupted or a scan OCR could not read."
        )
        self.word_count = word_count
        self.minimum = minimum


class TokenizerUnavailableError(ContractGuardError):
    """The BPE vocabulary could not be loaded and fallback is disabled."""
