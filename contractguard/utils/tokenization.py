"""Helpers for loading tiktoken encodings with operator-controlled fallback."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

import tiktoken

from contractguard.config import settings
from contractguard.errors import TokenizerUnavailableError

logger = logging.getLogger(__name__)


def _should_fallback(encoding_name: str, reason: Exception) -> bool:
    message = f"Failed to load tiktoken {encoding_name!r}. Reason: {reason}"
    if settings.allow_tiktoken_fallback:
        logger.warning(
            "%s. Proceeding with whitespace token approximation because ALLOW_TIKTOKEN_FALLBACK=1.",
            message,
        )
        return True
    raise TokenizerUnavailableError(
        f"{message}. Install the vocabulary (or make it reachable) or rerun with "
        "ALLOW_TIKTOKEN_FALLBACK=1 to allow whitespace fallback."
    ) from reason


@lru_cache(maxsize=None)
def get_encoding(encoding_name: Optional[str] = None) -> Optional[tiktoken.Encoding]:
    """Load a BPE encoding once per process.

    Returns ``None`` when loading failed and the whitespace fallback is
    allowed; raises :class:`TokenizerUnavailableError` otherwise.
    """
    name = encoding_name or settings.tokenizer_encoding
    try:
        return tiktoken.get_encoding(name)
    except Exception as exc:
        if _should_fallback(name, exc):
            return None
        raise


def release_encoding() -> None:
    """Drop cached encodings so the next call reloads them."""
    get_encoding.cache_clear()


class Tokenizer:
    """Turns strings into token ids or token counts."""

    def __init__(self, encoding: Optional[tiktoken.Encoding]) -> None:
        self.encoding = encoding

    @classmethod
    def default(cls) -> "Tokenizer":
        return cls(get_encoding())

    def encode(self, text: str) -> List[int]:
        if self.encoding is not None:
            return list(self.encoding.encode(text, disallowed_special=()))
        # Whitespace approximation: one pseudo-id per word.
        return list(range(len(text.split())))

    def count(self, text: str) -> int:
        return len(self.encode(text))


def count_tokens(text: str, encoding: Optional[tiktoken.Encoding] = None) -> int:
    """Count tokens using tiktoken if available, otherwise whitespace approximation."""
    if encoding is None:
        encoding = get_encoding()
    return Tokenizer(encoding).count(text)
