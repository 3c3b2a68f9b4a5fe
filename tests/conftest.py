import io
import zipfile

import docx
import fitz
import pytest

from contractguard.utils.tokenization import Tokenizer, release_encoding


def _words(count: int, word: str = "clause") -> str:
    lines = []
    for start in range(0, count, 10):
        lines.append(" ".join(f"{word}{i}" for i in range(start, min(start + 10, count))))
    return "\n".join(lines)


@pytest.fixture
def make_pdf():
    def factory(*page_texts: str) -> bytes:
        doc = fitz.open()
        for text in page_texts:
            page = doc.new_page()
            page.insert_text((72, 72), text, fontsize=11)
        data = doc.tobytes()
        doc.close()
        return data

    return factory


@pytest.fixture
def make_docx():
    def factory(*paragraphs: str, cell: str = "") -> bytes:
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if cell:
            table = document.add_table(rows=1, cols=1)
            table.cell(0, 0).text = cell
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return factory


@pytest.fixture
def zip_without_document() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/styles.xml", "<w:styles/>")
    return buffer.getvalue()


@pytest.fixture
def words():
    return _words


@pytest.fixture
def word_tokenizer() -> Tokenizer:
    """Whitespace tokenizer: one token per word, no vocabulary download."""
    return Tokenizer(None)


@pytest.fixture(autouse=True)
def _fresh_encoding_cache():
    release_encoding()
    yield
    release_encoding()
