"""
Data Models for the Adaptive Chunking Pipeline

Defines:
1. Enums - TextFormat, DocumentType, SectionKind, ContentType, ArticleType
2. Structural patterns - ArticlePattern, SectionPattern, ChapterPattern
3. DocumentStructure - detection output with type and confidence
4. ChunkingOptions - per-call token budgets and strategy switches
5. ChunkMetadata / Chunk - a single token-budgeted text segment
6. ChunkingResult - complete chunking output with statistics

Design Principles:
- Pydantic v2 for validation and serialization
- Character offsets always refer to the caller's raw text
- Save/load pattern for persisted results (used by the service layer only)

Usage:
    options = ChunkingOptions(max_tokens=512)
    chunks = AdaptiveChunker().chunk(text, structure, options)
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class TextFormat(str, Enum):
    """Format tag supplied by the text extraction layer."""
    PLAIN = "plain"
    MARKDOWN = "markdown"

    @classmethod
    def coerce(cls, value: Any) -> "TextFormat":
        """Map any format tag to a TextFormat; unknown or missing means plain."""
        if isinstance(value, TextFormat):
            return value
        if isinstance(value, str) and value.strip().lower() in ("markdown", "md"):
            return cls.MARKDOWN
        return cls.PLAIN


class DocumentType(str, Enum):
    """
    Document template inferred from the detected patterns.

    REGULATORY: laws, regulations, contracts (many articles)
    MANUAL: books and manuals (several chapters)
    REPORT: reports with many sections
    MIXED: articles and sections together, neither dominant
    UNKNOWN: no clear structure
    """
    REGULATORY = "regulatory"
    REPORT = "report"
    MANUAL = "manual"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class SectionKind(str, Enum):
    MARKDOWN = "markdown"
    TEXTUAL = "textual"


class ContentType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    TABLE = "table"
    MIXED = "mixed"


class ArticleType(str, Enum):
    """COMPLETE: the whole article fits in one chunk. PARTIAL: it was split."""
    COMPLETE = "complete"
    PARTIAL = "partial"


class ChunkingStrategy(str, Enum):
    """Strategy chosen by the adaptive chunker for a document."""
    ARTICLE = "article"
    SECTION = "section"
    SENTENCE = "sentence"


# =============================================================================
# STRUCTURAL PATTERNS
# =============================================================================


class ArticlePattern(BaseModel):
    """An article marker ("Articolo 28", "Art. 5") and its span."""
    number: int = Field(..., description="Article number")
    text: str = Field(..., description="Marker text as found, e.g. 'Articolo 28'")
    start: int = Field(..., ge=0, description="Start offset of the marker")
    end: int = Field(..., ge=0, description="End offset of the article span")


class SectionPattern(BaseModel):
    """A markdown heading or textual section marker and its span."""
    title: str
    level: Optional[int] = Field(
        None,
        description="Heading depth (1-6) for markdown headings",
        ge=1,
        le=6,
    )
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    kind: SectionKind


class ChapterPattern(BaseModel):
    """A chapter marker; number is an int or an uppercase roman numeral."""
    number: Union[int, str]
    title: Optional[str] = None
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class DocumentStructure(BaseModel):
    """
    Structural analysis of one document.

    Computed once per document, consumed by the chunker, then discarded.
    """
    type: DocumentType = DocumentType.UNKNOWN
    articles: list[ArticlePattern] = Field(default_factory=list)
    sections: list[SectionPattern] = Field(default_factory=list)
    chapters: list[ChapterPattern] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    sampled: bool = Field(
        False,
        description="True if only a prefix of a very large document was analysed",
    )

    @property
    def pattern_count(self) -> int:
        return len(self.articles) + len(self.sections) + len(self.chapters)

    @property
    def has_patterns(self) -> bool:
        return self.pattern_count > 0

    def summary(self) -> str:
        sampled = " (sampled)" if self.sampled else ""
        return (
            f"type={self.type.value}, confidence={self.confidence:.2f}{sampled}, "
            f"articles={len(self.articles)}, sections={len(self.sections)}, "
            f"chapters={len(self.chapters)}"
        )


# =============================================================================
# CHUNKING OPTIONS
# =============================================================================


class ChunkingOptions(BaseModel):
    """
    Token budgets and strategy switches for one chunking call.

    Defaults target ~350 tokens per chunk for the embedding model.
    """
    target_tokens: int = Field(
        350,
        description="Preferred chunk size; chunks are flushed once they reach it",
        ge=1,
    )
    max_tokens: int = Field(
        450,
        description="Hard upper bound per chunk (oversized single words excepted)",
        ge=1,
    )
    min_tokens: int = Field(
        200,
        description="Minimum size for non-terminal chunks",
        ge=1,
    )
    preserve_structure: bool = Field(
        True,
        description="Chunk markdown documents section by section",
    )
    format: TextFormat = Field(
        TextFormat.PLAIN,
        description="Format of the source text",
    )
    article_confidence_threshold: float = Field(
        0.7,
        description="Structure confidence required for article-based chunking",
        ge=0.0,
        le=1.0,
    )

    @field_validator("format", mode="before")
    @classmethod
    def _coerce_format(cls, value: Any) -> TextFormat:
        return TextFormat.coerce(value)

    def model_post_init(self, __context: Any) -> None:
        if self.min_tokens > self.target_tokens:
            raise ValueError(
                f"min_tokens ({self.min_tokens}) must not exceed "
                f"target_tokens ({self.target_tokens})"
            )
        if self.target_tokens > self.max_tokens:
            raise ValueError(
                f"target_tokens ({self.target_tokens}) must not exceed "
                f"max_tokens ({self.max_tokens})"
            )


# =============================================================================
# CHUNKS
# =============================================================================


class ChunkMetadata(BaseModel):
    """
    Positional and structural metadata attached to each chunk.

    Downstream consumers use it verbatim and must not re-derive boundaries.
    """
    token_count: int = Field(..., ge=0)
    sentence_count: int = Field(
        ...,
        description="Sentences new to this chunk (the overlap sentence is excluded)",
        ge=0,
    )
    char_start: int = Field(..., ge=0, description="Start offset in the source text")
    char_end: int = Field(..., ge=0, description="Exclusive end offset in the source text")
    content_type: ContentType = ContentType.PARAGRAPH
    has_overlap: bool = Field(
        False,
        description="Chunk starts with the last sentence of the previous chunk",
    )

    # Structural tags (set by the chunking strategy that produced the chunk)
    article_number: Optional[int] = None
    article_type: Optional[ArticleType] = None
    section_title: Optional[str] = None
    section_level: Optional[int] = None
    chapter_number: Optional[Union[int, str]] = None


class Chunk(BaseModel):
    """A single text chunk with metadata, ready for embedding."""
    content: str = Field(..., min_length=1)
    chunk_index: int = Field(..., ge=0)
    metadata: ChunkMetadata

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# RESULTS
# =============================================================================


class ChunkingStats(BaseModel):
    """Statistics about the chunking process."""
    total_chunks: int = 0
    total_tokens: int = 0
    avg_chunk_tokens: float = 0.0
    min_chunk_tokens: int = 0
    max_chunk_tokens: int = 0
    total_sentences: int = 0
    strategy: Optional[ChunkingStrategy] = None


class ChunkingResult(BaseModel):
    """
    Complete result of chunking a document.

    Contains the detected structure, all chunks and processing statistics.
    """
    source_file: str = Field(
        ...,
        description="Path of the source text file (empty for in-memory text)",
    )
    document_id: str = Field(..., description="Document identifier")
    options: ChunkingOptions = Field(..., description="Options used for chunking")
    structure: DocumentStructure = Field(default_factory=DocumentStructure)
    chunks: list[Chunk] = Field(default_factory=list)
    stats: ChunkingStats = Field(default_factory=ChunkingStats)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    def get_chunk(self, chunk_index: int) -> Optional[Chunk]:
        """Find a chunk by its index."""
        for chunk in self.chunks:
            if chunk.chunk_index == chunk_index:
                return chunk
        return None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def save(self, path: str) -> None:
        """Save chunking result to a JSON file."""
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: str) -> "ChunkingResult":
        """Load chunking result from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)
