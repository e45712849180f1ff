"""
Adaptive Chunker - Structure-preserving chunking for the RAG pipeline

Chooses a chunking strategy from the detected document structure:
1. Article-based: well-defined articles (confidence above the threshold).
   Each article becomes one chunk when it fits max_tokens; larger articles
   are packed sentence by sentence and tagged as partial.
2. Section-based: markdown documents with headings and preserve_structure.
   Each section is packed on its own and tagged with its title and level.
3. Sentence-aware fallback: the whole document is packed as one span.

Text before the first structural span is packed untagged, chunks inside a
detected chapter carry its number, and chunk indices are renumbered 0..N-1
across the whole output.

Usage:
    from adaptive_chunking import AdaptiveChunker, ChunkingOptions
    from adaptive_chunking import detect_document_structure

    structure = detect_document_structure(text, "plain")
    chunks = AdaptiveChunker().chunk(text, structure, ChunkingOptions())
"""

import logging
from bisect import bisect_right
from typing import Optional

from .models import (
    ArticlePattern,
    ArticleType,
    ChapterPattern,
    Chunk,
    ChunkingOptions,
    ChunkingStrategy,
    ChunkMetadata,
    DocumentStructure,
    SectionPattern,
    TextFormat,
)
from .packer import ChunkPacker, detect_content_type
from .sentence_splitter import WhitespaceMap, split_sentences
from .structure_detector import StructureDetector
from .token_counter import TokenCounter, get_default_counter

logger = logging.getLogger(__name__)


class AdaptiveChunker:
    """
    Splits a document into token-budgeted chunks, preserving articles or
    sections when the document has them.
    """

    def __init__(
        self,
        token_counter: Optional[TokenCounter] = None,
        detector: Optional[StructureDetector] = None,
    ):
        self.token_counter = token_counter or get_default_counter()
        self.packer = ChunkPacker(self.token_counter)
        self.detector = detector or StructureDetector()

    def chunk(
        self,
        text: str,
        structure: Optional[DocumentStructure] = None,
        options: Optional[ChunkingOptions] = None,
    ) -> list[Chunk]:
        """
        Chunk a document.

        Args:
            text: Extracted document text.
            structure: Output of the structure detector. Detected here when
                not supplied.
            options: Token budgets and strategy switches.

        Returns:
            Chunks with chunk_index 0..N-1. Empty only for empty text.
        """
        options = options or ChunkingOptions()
        if not text or not text.strip():
            return []

        if structure is None:
            structure = self.detector.detect(text, options.format)

        strategy = self.select_strategy(structure, options)
        logger.info(
            f"Chunking with {strategy.value} strategy "
            f"(type: {structure.type.value}, confidence: {structure.confidence:.2f})"
        )

        if strategy is ChunkingStrategy.ARTICLE:
            chunks = self._chunk_by_articles(text, structure.articles, options)
        elif strategy is ChunkingStrategy.SECTION:
            chunks = self._chunk_by_sections(text, structure.sections, options)
        else:
            chunks = self._pack_span(text, 0, len(text), options)

        if structure.chapters:
            chunks = self._tag_chapters(chunks, structure.chapters)

        chunks = [
            chunk.model_copy(update={"chunk_index": index})
            for index, chunk in enumerate(chunks)
        ]
        logger.info(f"Created {len(chunks)} chunks")
        return chunks

    @staticmethod
    def select_strategy(
        structure: DocumentStructure,
        options: ChunkingOptions,
    ) -> ChunkingStrategy:
        """Pick the chunking strategy; the first matching rule wins."""
        if structure.articles and structure.confidence > options.article_confidence_threshold:
            return ChunkingStrategy.ARTICLE
        if (
            options.format is TextFormat.MARKDOWN
            and options.preserve_structure
            and structure.sections
        ):
            return ChunkingStrategy.SECTION
        return ChunkingStrategy.SENTENCE

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    def _chunk_by_articles(
        self,
        text: str,
        articles: list[ArticlePattern],
        options: ChunkingOptions,
    ) -> list[Chunk]:
        chunks = self._pack_span(text, 0, articles[0].start, options)

        for article in articles:
            raw = text[article.start:article.end]
            article_text = raw.strip()
            if not article_text:
                continue

            tokens = self.token_counter.count(article_text)
            if tokens <= options.max_tokens:
                char_start = article.start + len(raw) - len(raw.lstrip())
                chunks.append(Chunk(
                    content=article_text,
                    chunk_index=len(chunks),
                    metadata=ChunkMetadata(
                        token_count=tokens,
                        sentence_count=max(len(split_sentences(article_text)), 1),
                        char_start=char_start,
                        char_end=char_start + len(article_text),
                        content_type=detect_content_type(article_text),
                        has_overlap=False,
                        article_number=article.number,
                        article_type=ArticleType.COMPLETE,
                    ),
                ))
                continue

            logger.info(
                f"Article {article.number} is too large ({tokens} tokens), "
                f"chunking by sentences"
            )
            for chunk in self._pack_span(text, article.start, article.end, options):
                chunks.append(self._tag(
                    chunk,
                    article_number=article.number,
                    article_type=ArticleType.PARTIAL,
                ))

        logger.debug(f"Created {len(chunks)} chunks from {len(articles)} articles")
        return chunks

    def _chunk_by_sections(
        self,
        text: str,
        sections: list[SectionPattern],
        options: ChunkingOptions,
    ) -> list[Chunk]:
        chunks = self._pack_span(text, 0, sections[0].start, options)

        for section in sections:
            for chunk in self._pack_span(text, section.start, section.end, options):
                chunks.append(self._tag(
                    chunk,
                    section_title=section.title,
                    section_level=section.level,
                ))

        logger.debug(f"Created {len(chunks)} chunks from {len(sections)} sections")
        return chunks

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _pack_span(
        self,
        text: str,
        start: int,
        end: int,
        options: ChunkingOptions,
    ) -> list[Chunk]:
        """Pack text[start:end] and report offsets against the full text."""
        span = text[start:end]
        sentences = split_sentences(span)
        if not sentences:
            return []

        chunks = self.packer.pack(
            sentences,
            target_tokens=options.target_tokens,
            max_tokens=options.max_tokens,
            min_tokens=options.min_tokens,
        )

        offsets = WhitespaceMap(span)
        return [
            self._tag(
                chunk,
                char_start=start + offsets.to_raw_start(chunk.metadata.char_start),
                char_end=start + offsets.to_raw_end(chunk.metadata.char_end),
            )
            for chunk in chunks
        ]

    @staticmethod
    def _tag_chapters(chunks: list[Chunk], chapters: list[ChapterPattern]) -> list[Chunk]:
        starts = [chapter.start for chapter in chapters]
        tagged = []
        for chunk in chunks:
            i = bisect_right(starts, chunk.metadata.char_start) - 1
            if i >= 0 and chunk.metadata.char_start < chapters[i].end:
                chunk = AdaptiveChunker._tag(chunk, chapter_number=chapters[i].number)
            tagged.append(chunk)
        return tagged

    @staticmethod
    def _tag(chunk: Chunk, **metadata) -> Chunk:
        return chunk.model_copy(
            update={"metadata": chunk.metadata.model_copy(update=metadata)}
        )


def adaptive_chunking(
    text: str,
    structure: Optional[DocumentStructure] = None,
    options: Optional[ChunkingOptions] = None,
    token_counter: Optional[TokenCounter] = None,
) -> list[Chunk]:
    """Chunk a document with a one-off AdaptiveChunker."""
    return AdaptiveChunker(token_counter).chunk(text, structure, options)
