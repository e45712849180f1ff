"""
Token Counter for the Chunking Pipeline

Uses tiktoken with the cl100k_base encoding (the encoding behind
gpt-3.5-turbo and GPT-4) to size chunks for the embedding model. When the
encoding cannot be loaded (e.g. offline without a cached BPE file), counting
degrades to a character heuristic of roughly four characters per token.

The counter is a capability passed into the packer and the orchestrator,
so tests can substitute the deterministic ApproximateTokenCounter.

Usage:
    from adaptive_chunking.token_counter import count_tokens, count_tokens_batch

    n = count_tokens("Questo è un esempio.")
    counts = count_tokens_batch(["Prima frase.", "Seconda frase."])
"""

import logging
import math
import threading
from typing import Optional, Protocol

import tiktoken

from .sentence_splitter import normalize_whitespace

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"

# Average characters per token used by the fallback heuristic.
CHARS_PER_TOKEN = 4


class TokenCounter(Protocol):
    """Anything that can estimate the token count of a text span."""

    def count(self, text: str) -> int:
        ...


class ApproximateTokenCounter:
    """Deterministic heuristic: ceil(len(normalized text) / 4)."""

    def count(self, text: str) -> int:
        if not text:
            return 0
        return math.ceil(len(normalize_whitespace(text)) / CHARS_PER_TOKEN)


class TiktokenCounter:
    """
    Precise token counter backed by a tiktoken encoding.

    The encoding is loaded on first use and shared by every thread using
    this counter. If loading fails, the counter permanently switches to
    the approximate heuristic and logs a single warning.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name
        self._encoder: Optional[tiktoken.Encoding] = None
        self._fallback: Optional[ApproximateTokenCounter] = None
        self._lock = threading.Lock()

    @property
    def is_precise(self) -> bool:
        """True when the tiktoken encoding is in use."""
        self._ensure_loaded()
        return self._encoder is not None

    def _ensure_loaded(self) -> None:
        if self._encoder is not None or self._fallback is not None:
            return
        with self._lock:
            if self._encoder is not None or self._fallback is not None:
                return
            try:
                self._encoder = tiktoken.get_encoding(self.encoding_name)
                logger.debug(f"Loaded tiktoken encoding '{self.encoding_name}'")
            except Exception as e:
                logger.warning(
                    f"Tiktoken encoding '{self.encoding_name}' unavailable, "
                    f"using approximate token counts: {e}"
                )
                self._fallback = ApproximateTokenCounter()

    def count(self, text: str) -> int:
        """
        Count the number of tokens in a text string.

        Args:
            text: The text to tokenize.

        Returns:
            Number of tokens (0 for empty input).
        """
        if not text:
            return 0
        self._ensure_loaded()
        if self._encoder is not None:
            return len(self._encoder.encode(text, disallowed_special=()))
        return self._fallback.count(text)


# Process-wide default counter, created on first use.
_default_counter: Optional[TiktokenCounter] = None
_default_lock = threading.Lock()


def get_default_counter() -> TiktokenCounter:
    """Get or create the shared TiktokenCounter (singleton)."""
    global _default_counter
    if _default_counter is None:
        with _default_lock:
            if _default_counter is None:
                _default_counter = TiktokenCounter()
    return _default_counter


def count_tokens(text: str) -> int:
    """
    Count the number of tokens in a text string.

    Args:
        text: The text to tokenize.

    Returns:
        Number of tokens.
    """
    return get_default_counter().count(text)


def count_tokens_batch(texts: list[str]) -> list[int]:
    """
    Count tokens for a list of texts.

    Args:
        texts: List of text strings.

    Returns:
        List of token counts, one per input text.
    """
    counter = get_default_counter()
    return [counter.count(t) for t in texts]
