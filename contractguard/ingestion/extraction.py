"""Extract normalized text from uploaded contract files (PDF or DOCX)."""

from __future__ import annotations

import io
import logging
import re
from typing import Callable, Iterator, List, Optional, Sequence, Union

import docx
import fitz
import pytesseract
from docx.oxml.ns import qn
from PIL import Image

from contractguard.config import settings
from contractguard.errors import DocxStructureError, OcrError, UnsupportedFileTypeError
from contractguard.models.document import ExtractionMethod, ExtractionResult, FileType

logger = logging.getLogger(__name__)

PAGE_BREAK_MARKER = "[PAGE_BREAK]"
PAGE_BREAK = f"\n\n{PAGE_BREAK_MARKER}\n\n"

LINE_SPACE_PATTERN = re.compile(r"[^\S\n]+")
NEWLINE_EDGE_PATTERN = re.compile(r" ?\n ?")
BLANK_RUN_PATTERN = re.compile(r"\n{3,}")
NON_PRINTABLE_PATTERN = re.compile(r"[^\t\n\r\x20-\x7e\u00a0-\U0010ffff]")

if settings.tesseract_cmd:
    pytesseract.pytesseract.tesseract_cmd = settings.tesseract_cmd


def normalize_text(raw: str) -> str:
    """Unify line endings, drop control characters and collapse whitespace."""
    text = raw.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")
    text = NON_PRINTABLE_PATTERN.sub("", text)
    text = LINE_SPACE_PATTERN.sub(" ", text)
    text = NEWLINE_EDGE_PATTERN.sub("\n", text)
    text = BLANK_RUN_PATTERN.sub("\n\n", text)
    return text.strip()


def count_words(text: str) -> int:
    return len(text.split())


def count_content_words(text: str) -> int:
    """Word count ignoring the page-break markers inserted between PDF pages."""
    return sum(1 for word in text.split() if word != PAGE_BREAK_MARKER)


def _result(raw: str, page_count: int, method: ExtractionMethod) -> ExtractionResult:
    text = normalize_text(raw)
    return ExtractionResult(
        text=text,
        page_count=page_count,
        method=method,
        word_count=count_words(text),
    )


# --- PDF strategies -------------------------------------------------------


class DigitalPdfStrategy:
    """Read the PDF's embedded text layer."""

    name = "digital"

    def __call__(self, buffer: bytes) -> ExtractionResult:
        with fitz.open(stream=buffer, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
            page_count = doc.page_count
        return _result(PAGE_BREAK.join(pages), page_count, ExtractionMethod.DIGITAL)


class OcrPdfStrategy:
    """Rasterise every page and read it back with Tesseract."""

    name = "ocr"

    def __init__(self, language: Optional[str] = None, dpi: Optional[int] = None) -> None:
        self.language = language or settings.ocr_language
        self.dpi = dpi or settings.ocr_dpi

    def _page_images(self, doc: fitz.Document) -> Iterator[Image.Image]:
        for page in doc:
            pixmap = page.get_pixmap(dpi=self.dpi)
            yield Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)

    def __call__(self, buffer: bytes) -> ExtractionResult:
        logger.info("Starting OCR extraction (lang=%s, dpi=%s)", self.language, self.dpi)
        texts: List[str] = []
        try:
            with fitz.open(stream=buffer, filetype="pdf") as doc:
                total = doc.page_count
                if not total:
                    raise OcrError("OCR extraction failed: document has no pages")
                for number, image in enumerate(self._page_images(doc), start=1):
                    try:
                        texts.append(pytesseract.image_to_string(image, lang=self.language))
                    finally:
                        image.close()
                    logger.debug("OCR progress %s/%s pages", number, total)
        except OcrError:
            raise
        except Exception as exc:
            raise OcrError(f"OCR extraction failed: {exc}") from exc

        # Page boundaries are not reported for OCR output.
        result = _result("\n".join(texts), 1, ExtractionMethod.OCR)
        logger.info("OCR extraction complete (%s words)", result.word_count)
        return result


Strategy = Callable[[bytes], ExtractionResult]


def run_strategies(
    buffer: bytes,
    strategies: Sequence[Strategy],
    accept: Callable[[ExtractionResult], bool],
) -> ExtractionResult:
    """Try strategies in priority order until one produces an acceptable result.

    Errors and rejections of all but the last strategy are logged and
    absorbed; whatever the last strategy returns or raises is final.
    """
    if not strategies:
        raise ValueError("At least one extraction strategy is required.")
    *fallible, final = strategies
    for strategy in fallible:
        name = getattr(strategy, "name", repr(strategy))
        try:
            result = strategy(buffer)
        except Exception as exc:
            logger.warning("%s extraction failed, falling back: %s", name, exc)
            continue
        if accept(result):
            return result
        logger.warning(
            "%s extraction yielded too few words (%s), falling back", name, result.word_count
        )
    return final(buffer)


# --- DOCX -----------------------------------------------------------------


def _open_docx(buffer: bytes) -> docx.document.Document:
    try:
        return docx.Document(io.BytesIO(buffer))
    except Exception as exc:
        raise DocxStructureError(
            f"Invalid DOCX file: could not read word/document.xml ({exc})"
        ) from exc


INLINE_TEXT = {qn("w:t"): None, qn("w:tab"): "\t", qn("w:br"): "\n", qn("w:cr"): "\n"}


def _owning_paragraph(node):
    """Nearest enclosing ``w:p``, or None for paragraph properties (tab stops)."""
    parent = node.getparent()
    while parent is not None and parent.tag != qn("w:p"):
        if parent.tag == qn("w:pPr"):
            return None
        parent = parent.getparent()
    return parent


def _inline_text(paragraph) -> str:
    """Literal text of a paragraph, including runs nested in insertions,
    content controls, smart tags and simple fields."""
    parts: List[str] = []
    for node in paragraph.iter(*INLINE_TEXT):
        # Text of nested paragraphs (text boxes) belongs to those paragraphs.
        if _owning_paragraph(node) is not paragraph:
            continue
        literal = INLINE_TEXT[node.tag]
        parts.append(node.text or "" if literal is None else literal)
    return "".join(parts)


def _paragraph_text(document: docx.document.Document) -> str:
    body = document.element.body
    lines = [_inline_text(p) for p in body.iter(qn("w:p"))]
    return "\n".join(lines).strip()


def _run_text(document: docx.document.Document) -> str:
    runs = [node.text or "" for node in document.element.iter(qn("w:t"))]
    return " ".join(runs).strip()


DOCX_READERS = (_paragraph_text, _run_text)


def extract_docx(buffer: bytes) -> ExtractionResult:
    document = _open_docx(buffer)
    raw = ""
    for reader in DOCX_READERS:
        raw = reader(document)
        if raw:
            break
    # DOCX has no page count without rendering.
    return _result(raw, 1, ExtractionMethod.DIGITAL)


# --- Engine ---------------------------------------------------------------


class TextExtractionEngine:
    """Converts PDF and DOCX buffers into :class:`ExtractionResult` objects."""

    def __init__(
        self,
        pdf_strategies: Optional[Sequence[Strategy]] = None,
        min_word_count: Optional[int] = None,
    ) -> None:
        self.pdf_strategies = list(pdf_strategies or (DigitalPdfStrategy(), OcrPdfStrategy()))
        self.min_word_count = (
            settings.min_digital_word_count if min_word_count is None else min_word_count
        )

    def _accept(self, result: ExtractionResult) -> bool:
        return count_content_words(result.text) >= self.min_word_count

    def extract(self, buffer: bytes, file_type: Union[FileType, str]) -> ExtractionResult:
        kind = _coerce_file_type(file_type)
        logger.info("Starting text extraction (type=%s, size=%s bytes)", kind.value, len(buffer))
        if kind is FileType.DOCX:
            result = extract_docx(buffer)
        else:
            result = run_strategies(buffer, self.pdf_strategies, self._accept)
        logger.info(
            "Extraction complete (method=%s, pages=%s, words=%s)",
            result.method.value,
            result.page_count,
            result.word_count,
        )
        return result


def _coerce_file_type(file_type: Union[FileType, str]) -> FileType:
    if isinstance(file_type, FileType):
        return file_type
    try:
        return FileType(str(file_type).lower())
    except ValueError:
        raise UnsupportedFileTypeError(file_type) from None


def extract_text(buffer: bytes, file_type: Union[FileType, str]) -> ExtractionResult:
    """Extract normalized text from a PDF or DOCX buffer."""
    return TextExtractionEngine().extract(buffer, file_type)
