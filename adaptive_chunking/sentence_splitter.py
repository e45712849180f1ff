"""
Sentence Splitter for the Chunking Pipeline

Regex-based sentence boundary detection for Italian, English and other
documents written in a cased script. No external NLP libraries.

Design:
- Normalize every whitespace run (including newlines) to a single space
- Split after a run of sentence-ending punctuation (.!?) followed by a space
  and an uppercase letter of any script (str.isupper), or at the end of the
  text
- Abbreviations and initials are NOT protected: "Dott. Rossi" splits after
  "Dott.". Downstream chunk boundaries depend on this behavior, and the
  packer's minimum-size merge absorbs most of the resulting fragments.
- Joining the result with single spaces reproduces the normalized text

Usage:
    from adaptive_chunking.sentence_splitter import split_sentences

    sentences = split_sentences("Questa è la prima. Questa è la seconda.")
    # ["Questa è la prima.", "Questa è la seconda."]
"""

import re
from bisect import bisect_right

_WHITESPACE_RUN = re.compile(r"\s+")
_WORD = re.compile(r"\S+")

# Terminal punctuation followed by one space, or at end of text. Operates on
# normalized text, so the separator is always a single space. split_sentences
# keeps only boundaries whose next character is upper case.
_SENTENCE_BOUNDARY = re.compile(r"[.!?]+(?: |$)")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip both ends."""
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(" ", text).strip()


class WhitespaceMap:
    """
    Maps character offsets in normalize_whitespace(text) back to offsets
    in the original text.

    Stores one entry per word, so memory grows with the word count rather
    than the character count.
    """

    def __init__(self, text: str):
        self._norm_starts: list[int] = []
        self._raw_starts: list[int] = []
        self._raw_ends: list[int] = []
        position = 0
        for match in _WORD.finditer(text or ""):
            self._norm_starts.append(position)
            self._raw_starts.append(match.start())
            self._raw_ends.append(match.end())
            position += match.end() - match.start() + 1
        self.normalized_length = max(position - 1, 0)

    def to_raw_start(self, offset: int) -> int:
        """Raw offset of the character at a normalized offset."""
        if not self._norm_starts:
            return 0
        if offset >= self.normalized_length:
            return self._raw_ends[-1]
        i = max(bisect_right(self._norm_starts, offset) - 1, 0)
        delta = offset - self._norm_starts[i]
        if delta < self._raw_ends[i] - self._raw_starts[i]:
            return self._raw_starts[i] + delta
        # Offset points at the single space standing in for a whitespace run.
        return self._raw_ends[i]

    def to_raw_end(self, offset: int) -> int:
        """Raw exclusive end for a normalized exclusive end offset."""
        if offset <= 0:
            return self._raw_starts[0] if self._raw_starts else 0
        return self.to_raw_start(offset - 1) + 1


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentences at punctuation boundaries.

    Args:
        text: Input text to split into sentences.

    Returns:
        List of sentence strings. Empty/whitespace input returns an empty
        list; text without any boundary comes back as a single sentence.
        " ".join(result) == normalize_whitespace(text) always holds.
    """
    normalized = normalize_whitespace(text)
    if not normalized:
        return []

    sentences: list[str] = []
    last = 0
    for match in _SENTENCE_BOUNDARY.finditer(normalized):
        end = match.end()
        if end < len(normalized) and not normalized[end].isupper():
            continue
        sentence = normalized[last:end].rstrip(" ")
        if sentence:
            sentences.append(sentence)
        last = end

    if last < len(normalized):
        sentences.append(normalized[last:])

    return sentences
