"""Tests for adaptive_chunking.chunker - Integration tests."""

import pytest

from adaptive_chunking import AdaptiveChunker, ChunkingOptions, adaptive_chunking
from adaptive_chunking.models import (
    ArticleType,
    ChunkingStrategy,
    DocumentStructure,
    SectionKind,
    SectionPattern,
    TextFormat,
)
from adaptive_chunking.sentence_splitter import normalize_whitespace
from adaptive_chunking.structure_detector import StructureDetector


TWO_ARTICLES = "Articolo 1\nPrimo testo.\n\nArticolo 2\nSecondo testo."


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def chunker(counter):
    return AdaptiveChunker(counter)


def _confident(text: str, format: str = "plain") -> DocumentStructure:
    """Detected structure with confidence raised above the article threshold."""
    structure = StructureDetector().detect(text, format)
    return structure.model_copy(update={"confidence": 0.9})


def _assert_offsets(text, chunks):
    for chunk in chunks:
        raw = text[chunk.metadata.char_start:chunk.metadata.char_end]
        assert normalize_whitespace(raw) == normalize_whitespace(chunk.content)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestBasicChunking:
    def test_empty_text(self, chunker):
        assert chunker.chunk("") == []
        assert chunker.chunk("   \n\t") == []

    def test_short_text_single_chunk(self, chunker):
        chunks = chunker.chunk("Questo è un testo breve.")

        assert len(chunks) == 1
        assert chunks[0].content == "Questo è un testo breve."
        assert chunks[0].metadata.article_number is None

    def test_deterministic(self, chunker, regulatory_text):
        options = ChunkingOptions(target_tokens=40, max_tokens=60, min_tokens=20)
        first = chunker.chunk(regulatory_text, options=options)
        second = chunker.chunk(regulatory_text, options=options)
        assert [c.model_dump() for c in first] == [c.model_dump() for c in second]

    def test_function_entry_point(self, counter):
        chunks = adaptive_chunking(TWO_ARTICLES, _confident(TWO_ARTICLES), token_counter=counter)
        assert [c.metadata.article_number for c in chunks] == [1, 2]


class TestArticleStrategy:
    def test_two_complete_articles(self, chunker):
        chunks = chunker.chunk(TWO_ARTICLES, _confident(TWO_ARTICLES), ChunkingOptions())

        assert len(chunks) == 2
        assert [c.metadata.article_number for c in chunks] == [1, 2]
        assert all(c.metadata.article_type == ArticleType.COMPLETE for c in chunks)
        assert chunks[0].content == "Articolo 1\nPrimo testo."
        assert chunks[1].content == "Articolo 2\nSecondo testo."

    def test_complete_content_equals_trimmed_span(self, chunker):
        structure = _confident(TWO_ARTICLES)
        chunks = chunker.chunk(TWO_ARTICLES, structure)

        for chunk, article in zip(chunks, structure.articles):
            assert chunk.content == TWO_ARTICLES[article.start:article.end].strip()
            assert TWO_ARTICLES[chunk.metadata.char_start:chunk.metadata.char_end] == chunk.content

    def test_low_confidence_falls_back_to_sentences(self, chunker):
        # Two articles score 0.24, below the 0.7 threshold.
        chunks = chunker.chunk(TWO_ARTICLES)

        assert len(chunks) == 1
        assert chunks[0].metadata.article_number is None
        assert chunks[0].content == normalize_whitespace(TWO_ARTICLES)

    def test_oversized_article_split_into_partials(self, chunker):
        body = " ".join(f"Frase numero {i} del secondo articolo." for i in range(10))
        text = f"Articolo 1\nBreve testo.\n\nArticolo 2\n{body}"
        options = ChunkingOptions(target_tokens=20, max_tokens=30, min_tokens=10)

        chunks = chunker.chunk(text, _confident(text), options)

        assert chunks[0].metadata.article_type == ArticleType.COMPLETE
        assert chunks[0].metadata.article_number == 1
        partials = chunks[1:]
        assert len(partials) > 1
        assert all(c.metadata.article_number == 2 for c in partials)
        assert all(c.metadata.article_type == ArticleType.PARTIAL for c in partials)
        assert all(c.metadata.token_count <= 30 for c in chunks)
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        _assert_offsets(text, chunks)

    def test_preamble_is_untagged(self, chunker):
        text = "Premessa generale del documento.\n\n" + TWO_ARTICLES
        chunks = chunker.chunk(text, _confident(text))

        assert chunks[0].content == "Premessa generale del documento."
        assert chunks[0].metadata.article_number is None
        assert [c.metadata.article_number for c in chunks[1:]] == [1, 2]

    def test_detected_regulatory_document(self, chunker, regulatory_text):
        structure = StructureDetector().detect(regulatory_text)
        assert structure.confidence > 0.7

        chunks = chunker.chunk(regulatory_text, structure)
        numbered = [c.metadata.article_number for c in chunks if c.metadata.article_number]
        assert numbered == list(range(1, 21))
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))


class TestSectionStrategy:
    def test_sections_tagged(self, chunker, markdown_text):
        options = ChunkingOptions(format="markdown")
        chunks = chunker.chunk(markdown_text, options=options)

        assert chunks[0].content == "Introduzione generale."
        assert chunks[0].metadata.section_title is None
        assert [c.metadata.section_title for c in chunks[1:]] == ["Primo", "Dettagli"]
        assert [c.metadata.section_level for c in chunks[1:]] == [1, 2]
        _assert_offsets(markdown_text, chunks)

    def test_preserve_structure_disabled(self, chunker, markdown_text):
        options = ChunkingOptions(format="markdown", preserve_structure=False)
        chunks = chunker.chunk(markdown_text, options=options)
        assert all(c.metadata.section_title is None for c in chunks)

    def test_plain_format_ignores_sections(self, chunker, markdown_text):
        chunks = chunker.chunk(markdown_text, options=ChunkingOptions(format="plain"))
        assert all(c.metadata.section_title is None for c in chunks)


class TestSentenceStrategy:
    def test_max_tokens_respected(self, chunker, counter):
        text = " ".join(f"Questa è la frase numero {i} del documento." for i in range(200))
        options = ChunkingOptions(target_tokens=60, max_tokens=80, min_tokens=30)
        chunks = chunker.chunk(text, options=options)

        assert len(chunks) > 1
        assert all(c.metadata.token_count <= 80 for c in chunks)
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        _assert_offsets(text, chunks)

    def test_oversized_sentence(self, chunker):
        text = " ".join(["word"] * 2000)
        chunks = chunker.chunk(text, options=ChunkingOptions(max_tokens=450))

        assert len(chunks) >= 1
        assert all(c.metadata.token_count <= 450 for c in chunks)
        _assert_offsets(text, chunks)

    def test_chapter_numbers(self, chunker):
        text = "Capitolo 1\nTesto uno.\n\nCapitolo 2\nTesto due."
        options = ChunkingOptions(target_tokens=5, max_tokens=10, min_tokens=1)
        chunks = chunker.chunk(text, options=options)

        assert [c.metadata.chapter_number for c in chunks] == [1, 2]


class TestSelectStrategy:
    def test_article(self):
        structure = _confident(TWO_ARTICLES)
        assert AdaptiveChunker.select_strategy(structure, ChunkingOptions()) == ChunkingStrategy.ARTICLE

    def test_threshold_is_strict(self):
        structure = _confident(TWO_ARTICLES).model_copy(update={"confidence": 0.7})
        assert AdaptiveChunker.select_strategy(structure, ChunkingOptions()) == ChunkingStrategy.SENTENCE

    def test_section(self):
        structure = DocumentStructure(sections=[
            SectionPattern(title="Titolo", level=1, start=0, end=10, kind=SectionKind.MARKDOWN)
        ])
        options = ChunkingOptions(format=TextFormat.MARKDOWN)
        assert AdaptiveChunker.select_strategy(structure, options) == ChunkingStrategy.SECTION

    def test_sentence_fallback(self):
        assert AdaptiveChunker.select_strategy(DocumentStructure(), ChunkingOptions()) == ChunkingStrategy.SENTENCE
