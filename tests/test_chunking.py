import hashlib

import pytest
import tiktoken

from contractguard.config import settings
from contractguard.errors import TokenizerUnavailableError
from contractguard.ingestion.chunking import Chunker, chunk_text, split_sentences
from contractguard.utils.tokenization import Tokenizer, count_tokens, get_encoding


def numbered_sentences(total: int):
    return [f"Sentence {i} has words." for i in range(total)]


def test_empty_text_yields_no_chunks(word_tokenizer):
    chunker = Chunker(tokenizer=word_tokenizer)
    assert chunker.chunk("") == []
    assert chunker.chunk("   \n\n  ") == []
    assert chunk_text("") == []


def test_split_sentences_boundaries():
    text = 'First one. Second one! Third? yes indeed. He said. "Stop now."'
    assert split_sentences(text) == [
        "First one.",
        "Second one!",
        "Third? yes indeed.",
        "He said.",
        '"Stop now."',
    ]


def test_split_sentences_keeps_paragraph_break():
    assert split_sentences("Alpha one.\n\n\nBeta two. Gamma three.") == [
        "Alpha one.",
        "\n\nBeta two.",
        "Gamma three.",
    ]


def test_short_text_is_single_chunk(word_tokenizer):
    text = "Alpha one.\n\nBeta two. Gamma three."
    chunks = Chunker(tokenizer=word_tokenizer, chunk_size=100, overlap_tokens=20).chunk(text)
    assert len(chunks) == 1
    chunk = chunks[0]
    assert chunk.index == 0
    assert chunk.text == "Alpha one.\n\nBeta two. Gamma three."
    assert chunk.token_count == 6
    assert chunk.hash == hashlib.sha256(chunk.text.encode("utf-8")).hexdigest()


def test_overlap_carries_trailing_sentence(word_tokenizer):
    sentences = numbered_sentences(6)
    chunker = Chunker(tokenizer=word_tokenizer, chunk_size=10, overlap_tokens=4)
    chunks = chunker.chunk(" ".join(sentences))

    assert [c.index for c in chunks] == [0, 1, 2, 3, 4]
    assert [c.text for c in chunks] == [
        f"{sentences[i]} {sentences[i + 1]}" for i in range(5)
    ]
    assert all(c.token_count == 8 for c in chunks)


def test_oversized_sentence_is_emitted_whole(word_tokenizer):
    text = "Short one. This sentence is far too long for budget. Tail end."
    chunks = Chunker(tokenizer=word_tokenizer, chunk_size=5, overlap_tokens=2).chunk(text)
    assert [c.text for c in chunks] == [
        "Short one.",
        "This sentence is far too long for budget.",
        "Tail end.",
    ]
    assert chunks[1].token_count == 8


def test_budget_overlap_and_coverage(word_tokenizer):
    sentences = [f"Clause {i} " + "word " * (i % 7) + "end." for i in range(120)]
    chunk_size, overlap = 40, 10
    chunks = Chunker(
        tokenizer=word_tokenizer, chunk_size=chunk_size, overlap_tokens=overlap
    ).chunk(" ".join(sentences))

    assert len(chunks) > 1
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(c.token_count <= chunk_size for c in chunks)

    rebuilt = []
    previous = []
    for chunk in chunks:
        current = split_sentences(chunk.text)
        assert sum(word_tokenizer.count(s) for s in current) == chunk.token_count
        carried = [s for s in current if s in previous]
        assert current[: len(carried)] == carried
        assert sum(word_tokenizer.count(s) for s in carried) <= overlap
        rebuilt.extend(s for s in current if s not in previous)
        previous = current
    assert rebuilt == sentences


def test_chunking_is_deterministic(word_tokenizer):
    text = " ".join(numbered_sentences(40))
    chunker = Chunker(tokenizer=word_tokenizer, chunk_size=25, overlap_tokens=5)
    first = chunker.chunk(text)
    second = chunker.chunk(text)
    assert first == second
    assert len({c.hash for c in first}) == len(first)


def test_count_tokens_with_whitespace_fallback(monkeypatch):
    def broken(name):
        raise OSError("vocabulary download blocked")

    monkeypatch.setattr(tiktoken, "get_encoding", broken)
    monkeypatch.setattr(settings, "allow_tiktoken_fallback", True)
    assert get_encoding() is None
    assert count_tokens("one two three") == 3


def test_missing_vocabulary_is_fatal_without_fallback(monkeypatch):
    def broken(name):
        raise OSError("vocabulary download blocked")

    monkeypatch.setattr(tiktoken, "get_encoding", broken)
    monkeypatch.setattr(settings, "allow_tiktoken_fallback", False)
    with pytest.raises(TokenizerUnavailableError, match="ALLOW_TIKTOKEN_FALLBACK"):
        count_tokens("one two three")


def test_count_tokens_with_bpe_vocabulary():
    try:
        encoding = tiktoken.get_encoding("cl100k_base")
    except Exception:
        pytest.skip("cl100k_base vocabulary not available")
    assert count_tokens("hello world", encoding) == 2
    assert Tokenizer(encoding).encode("hello world") == list(encoding.encode("hello world"))
