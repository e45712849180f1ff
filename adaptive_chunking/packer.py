"""
Chunk Packer - Greedy, sentence-aligned packing under token budgets

Groups sentences into chunks that never cut a sentence in half:
1. Accumulate sentences while the joined text stays within max_tokens.
2. Flush when the next sentence would overflow max_tokens, or eagerly once
   the buffer reaches target_tokens (and min_tokens).
3. After a flush the next chunk starts with the last sentence of the
   previous one (one-sentence overlap) for context continuity.
4. A sentence that alone exceeds max_tokens is split word by word into its
   own sub-chunks.
5. A final remainder below min_tokens is merged into the previous chunk when
   the merged text still fits max_tokens.

Offsets in the returned chunks are relative to " ".join(sentences); the
orchestrator maps them back to the source text.
"""

import logging
import re
from typing import Any, Optional

from .models import Chunk, ChunkMetadata, ContentType
from .token_counter import TokenCounter, get_default_counter

logger = logging.getLogger(__name__)

_HEADING_SIGNAL = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_LIST_SIGNAL = re.compile(r"^(?:[-*+]|\d+\.)\s+", re.MULTILINE)
_TABLE_SIGNAL = re.compile(r"\|.*\|")
_WORD = re.compile(r"\S+")


def detect_content_type(text: str) -> ContentType:
    """
    Classify chunk content from three independent signals.

    No signal is a paragraph, exactly one gives that type, more than one
    is mixed.
    """
    signals = [
        (ContentType.HEADING, bool(_HEADING_SIGNAL.search(text))),
        (ContentType.LIST, bool(_LIST_SIGNAL.search(text))),
        (ContentType.TABLE, bool(_TABLE_SIGNAL.search(text))),
    ]
    present = [content_type for content_type, found in signals if found]
    if not present:
        return ContentType.PARAGRAPH
    if len(present) > 1:
        return ContentType.MIXED
    return present[0]


class ChunkPacker:
    """Packs an ordered sentence sequence into token-budgeted chunks."""

    def __init__(self, token_counter: Optional[TokenCounter] = None):
        self.token_counter = token_counter or get_default_counter()

    def pack(
        self,
        sentences: list[str],
        target_tokens: int = 350,
        max_tokens: int = 450,
        min_tokens: int = 200,
    ) -> list[Chunk]:
        """
        Pack sentences into chunks.

        Args:
            sentences: Ordered sentences (e.g. from split_sentences).
            target_tokens: Size at which a chunk is flushed eagerly.
            max_tokens: Upper bound for every chunk except single words
                that alone exceed it.
            min_tokens: Size below which the final remainder is merged
                into the previous chunk.

        Returns:
            Chunks indexed 0..N-1.
        """
        if not sentences:
            return []

        packing = _Packing(self.token_counter, sentences, target_tokens, max_tokens, min_tokens)
        drafts = packing.run()

        chunks = [self._to_chunk(index, draft) for index, draft in enumerate(drafts)]
        if chunks:
            avg = sum(c.metadata.token_count for c in chunks) / len(chunks)
            logger.debug(
                f"Packed {len(sentences)} sentences into {len(chunks)} chunks, "
                f"avg tokens: {avg:.0f}"
            )
        return chunks

    @staticmethod
    def _to_chunk(index: int, draft: dict[str, Any]) -> Chunk:
        return Chunk(
            content=draft["text"],
            chunk_index=index,
            metadata=ChunkMetadata(
                token_count=draft["token_count"],
                sentence_count=draft["sentence_count"],
                char_start=draft["start"],
                char_end=draft["end"],
                content_type=detect_content_type(draft["text"]),
                has_overlap=draft["has_overlap"],
            ),
        )


class _Packing:
    """State of one pack() call. Buffers hold sentence indices."""

    def __init__(
        self,
        counter: TokenCounter,
        sentences: list[str],
        target_tokens: int,
        max_tokens: int,
        min_tokens: int,
    ):
        self.counter = counter
        self.sentences = sentences
        self.target_tokens = target_tokens
        self.max_tokens = max_tokens
        self.min_tokens = min_tokens

        # Offsets of each sentence within " ".join(sentences).
        self.starts: list[int] = []
        position = 0
        for sentence in sentences:
            self.starts.append(position)
            position += len(sentence) + 1

        self.drafts: list[dict[str, Any]] = []
        self.buffer: list[int] = []
        self.overlap = False  # buffer[0] repeats the previous chunk's last sentence
        self.tokens = 0

    def run(self) -> list[dict[str, Any]]:
        for i, sentence in enumerate(self.sentences):
            if not sentence.strip():
                continue

            sentence_tokens = self.counter.count(sentence)
            if sentence_tokens > self.max_tokens:
                logger.warning(
                    f"Sentence exceeds max_tokens ({sentence_tokens} > {self.max_tokens}), "
                    f"splitting by words"
                )
                self._close_remainder()
                self._split_oversized(i)
                continue

            candidate = self.buffer + [i]
            candidate_tokens = self.counter.count(self._join(candidate))

            if candidate_tokens > self.max_tokens and self.buffer:
                if self._has_new_sentences():
                    self._emit()
                last = self.buffer[-1]
                pair_tokens = self.counter.count(self._join([last, i]))
                if pair_tokens <= self.max_tokens:
                    self._reset([last, i], True, pair_tokens)
                else:
                    self._reset([i], False, sentence_tokens)
            else:
                self.buffer = candidate
                self.tokens = candidate_tokens

            if (
                self._has_new_sentences()
                and self.tokens >= self.target_tokens
                and self.tokens >= self.min_tokens
            ):
                self._emit()
                last = self.buffer[-1]
                self._reset([last], True, self.counter.count(self.sentences[last]))

        self._close_remainder()
        return self.drafts

    # -------------------------------------------------------------------------
    # Buffer handling
    # -------------------------------------------------------------------------

    def _join(self, indices: list[int]) -> str:
        return " ".join(self.sentences[j] for j in indices)

    def _end(self, index: int) -> int:
        return self.starts[index] + len(self.sentences[index])

    def _new_indices(self) -> list[int]:
        return self.buffer[1:] if self.overlap else self.buffer

    def _has_new_sentences(self) -> bool:
        return bool(self._new_indices())

    def _reset(self, buffer: list[int], overlap: bool, tokens: int) -> None:
        self.buffer = buffer
        self.overlap = overlap
        self.tokens = tokens

    def _emit(self) -> None:
        self.drafts.append({
            "text": self._join(self.buffer),
            "token_count": self.tokens,
            "sentence_count": len(self._new_indices()),
            "start": self.starts[self.buffer[0]],
            "end": self._end(self.buffer[-1]),
            "has_overlap": self.overlap,
        })

    def _close_remainder(self) -> None:
        """
        Flush what is left in the buffer at the end of a run.

        Remainders below min_tokens are merged into the previous chunk
        (without repeating the overlap sentence) when the result fits
        max_tokens; otherwise they stand alone as the run's last chunk.
        """
        new = self._new_indices()
        if not new:
            self._reset([], False, 0)
            return

        if self.tokens < self.min_tokens and self.drafts:
            previous = self.drafts[-1]
            merged_text = previous["text"] + " " + self._join(new)
            merged_tokens = self.counter.count(merged_text)
            if merged_tokens <= self.max_tokens:
                previous["text"] = merged_text
                previous["token_count"] = merged_tokens
                previous["sentence_count"] += len(new)
                previous["end"] = self._end(new[-1])
                self._reset([], False, 0)
                return

        self._emit()
        self._reset([], False, 0)

    def _split_oversized(self, index: int) -> None:
        """Split one oversized sentence into word-aligned sub-chunks."""
        sentence = self.sentences[index]
        base = self.starts[index]

        piece_start: Optional[int] = None
        piece_end = 0
        # Upper bound on the piece's token count: word counts plus one per
        # separator. The piece is recounted only when the bound passes max.
        bound = 0

        for word in _WORD.finditer(sentence):
            word_tokens = self.counter.count(word.group())
            if piece_start is None:
                piece_start, piece_end = word.start(), word.end()
                bound = word_tokens
                continue
            bound += word_tokens + 1
            if bound > self.max_tokens:
                bound = self.counter.count(sentence[piece_start:word.end()])
                if bound > self.max_tokens:
                    self._emit_piece(sentence, base, piece_start, piece_end)
                    piece_start, piece_end = word.start(), word.end()
                    bound = word_tokens
                    continue
            piece_end = word.end()

        if piece_start is not None:
            self._emit_piece(sentence, base, piece_start, piece_end)

    def _emit_piece(self, sentence: str, base: int, start: int, end: int) -> None:
        text = sentence[start:end]
        self.drafts.append({
            "text": text,
            "token_count": self.counter.count(text),
            "sentence_count": 1,
            "start": base + start,
            "end": base + end,
            "has_overlap": False,
        })
