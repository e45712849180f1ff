"""
Structure Detector - Heuristic detection of recurring structural markers

Scans raw document text for:
- Articles ("Articolo 28", "Art. 5", "Article 1")
- Sections (markdown headings, or "Sezione 1", "Parte II", "Part Two")
- Chapters ("Capitolo 3", "Chapter IV: Title")

and infers a document type with a confidence score. Works for any kind of
document (regulations, reports, manuals); absence of structure is a valid,
low-confidence result rather than an error.

Algorithm:
1. Documents above the large-document threshold are sampled: only the first
   ~500 KB are scanned and the confidence is penalized.
2. Each detector runs its regex table, drops near-duplicate matches, sorts by
   position and assigns spans: a pattern ends where the next one starts, the
   last one at the document end.
3. The document type follows from pattern counts (thresholds in
   DetectionConfig) and the confidence from pattern density, article
   numbering order and type clarity.

Usage:
    from adaptive_chunking import detect_document_structure

    structure = detect_document_structure(text, "plain")
    print(structure.type, structure.confidence)
"""

import logging
import re
import time
from typing import Any, Optional, Union

from .config import DetectionConfig
from .models import (
    ArticlePattern,
    ChapterPattern,
    DocumentStructure,
    DocumentType,
    SectionKind,
    SectionPattern,
    TextFormat,
)
from .patterns import MARKDOWN_HEADING

logger = logging.getLogger(__name__)

# A marker must start its line and be followed by the end of the line or a
# terminator, which keeps inline references ("ai sensi dell'art. 5") out. A
# dash only terminates after whitespace, so "Articolo 12-bis" is no article 12.
_LINE_MARKER = (
    r"^[ \t]*(?P<marker>{body})"
    r"(?:[ \t]*(?=\r?$|[.:])|[ \t]+(?=[\-–]))"
)

# Chapters may carry a title after a colon, or after a spaced dash.
_CHAPTER_LINE = (
    r"^[ \t]*(?P<marker>{body})"
    r"(?:(?:(?:[ \t]*:|[ \t]+[\-–])[ \t]*(?P<title>[^\r\n]*?))?[ \t]*\r?$"
    r"|[ \t]*(?=\.))"
)

_FENCE = re.compile(r"^[ \t]*(?:```|~~~)")

_FLAGS = re.IGNORECASE | re.MULTILINE


class StructureDetector:
    """
    Detects articles, sections and chapters in extracted document text.

    Stateless apart from compiled regexes, so one instance can be shared
    across documents and threads.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()
        self._article_regexes = [
            re.compile(_LINE_MARKER.format(body=body), _FLAGS)
            for body in self.config.article_patterns
        ]
        self._section_regexes = [
            re.compile(_LINE_MARKER.format(body=body), _FLAGS)
            for body in self.config.section_patterns
        ]
        self._chapter_regexes = [
            re.compile(_CHAPTER_LINE.format(body=body), _FLAGS)
            for body in self.config.chapter_patterns
        ]
        self._heading_regex = re.compile(MARKDOWN_HEADING)

    def detect(
        self,
        text: str,
        format: Union[TextFormat, str, None] = TextFormat.PLAIN,
    ) -> DocumentStructure:
        """
        Detect the structure of a document.

        Args:
            text: Extracted document text.
            format: 'markdown' or 'plain'; anything else is treated as plain.

        Returns:
            DocumentStructure with the detected patterns, type and confidence.
        """
        text = text or ""
        text_format = TextFormat.coerce(format)
        size = len(text)
        logger.info(
            f"Detecting structure (format: {text_format.value}, size: {size / 1024:.2f}KB)"
        )

        sampled = size > self.config.large_document_threshold
        sample = text
        if sampled:
            # Cut at a line break so no marker line is truncated
            cut = text.rfind("\n", 0, self.config.sample_size)
            sample = text[:cut] if cut > 0 else text[: self.config.sample_size]
            logger.warning(
                f"Large document ({size / 1024 / 1024:.2f}MB), detecting structure "
                f"on the first {len(sample) / 1024:.0f}KB only"
            )

        started = time.perf_counter()
        articles = self._detect_articles(sample)
        logger.debug(
            f"Articles: {len(articles)} in {(time.perf_counter() - started) * 1000:.0f}ms"
        )

        started = time.perf_counter()
        if text_format is TextFormat.MARKDOWN:
            sections = self._detect_markdown_sections(sample)
        else:
            sections = self._detect_textual_sections(sample)
        logger.debug(
            f"Sections: {len(sections)} in {(time.perf_counter() - started) * 1000:.0f}ms"
        )

        started = time.perf_counter()
        chapters = self._detect_chapters(sample)
        logger.debug(
            f"Chapters: {len(chapters)} in {(time.perf_counter() - started) * 1000:.0f}ms"
        )

        doc_type = self._infer_document_type(articles, sections, chapters)
        confidence = self._calculate_confidence(articles, sections, chapters, doc_type)

        if sampled:
            confidence = min(confidence * self.config.sampling_penalty, 1.0)
            # Patterns were found in the sample; the last of each kind owns
            # the rest of the document.
            articles = self._extend_last(articles, len(sample), size)
            sections = self._extend_last(sections, len(sample), size)
            chapters = self._extend_last(chapters, len(sample), size)

        structure = DocumentStructure(
            type=doc_type,
            articles=articles,
            sections=sections,
            chapters=chapters,
            confidence=confidence,
            sampled=sampled,
        )
        logger.info(f"Detected structure: {structure.summary()}")
        return structure

    # -------------------------------------------------------------------------
    # Detectors
    # -------------------------------------------------------------------------

    def _detect_articles(self, text: str) -> list[ArticlePattern]:
        found = self._scan(
            text,
            self._article_regexes,
            lambda m: {
                "key": int(m.group("number")),
                "number": int(m.group("number")),
                "text": m.group("marker").strip(),
            },
        )
        self._assign_ends(found, len(text))

        if found and self.config.trim_last_article_at_blank_line:
            last = found[-1]
            blank = text.find("\n\n", last["start"] + self.config.last_article_min_span)
            if blank > last["start"]:
                last["end"] = blank

        return [
            ArticlePattern(number=f["number"], text=f["text"], start=f["start"], end=f["end"])
            for f in found
        ]

    def _detect_textual_sections(self, text: str) -> list[SectionPattern]:
        def build(m: re.Match) -> dict[str, Any]:
            line_end = text.find("\n", m.start("marker"))
            if line_end == -1:
                line_end = len(text)
            title = text[m.start("marker"):line_end].strip()
            return {"key": title, "title": title}

        found = self._scan(text, self._section_regexes, build)
        self._assign_ends(found, len(text))
        return [
            SectionPattern(
                title=f["title"],
                start=f["start"],
                end=f["end"],
                kind=SectionKind.TEXTUAL,
            )
            for f in found
        ]

    def _detect_markdown_sections(self, text: str) -> list[SectionPattern]:
        found: list[dict[str, Any]] = []
        offset = 0
        in_fence = False

        for line in text.splitlines(keepends=True):
            if len(found) >= self.config.max_patterns_per_type:
                break
            if _FENCE.match(line):
                in_fence = not in_fence
            elif not in_fence:
                match = self._heading_regex.match(line.rstrip("\r\n"))
                if match:
                    found.append({
                        "title": match.group(2).strip(),
                        "level": len(match.group(1)),
                        "start": offset,
                    })
            offset += len(line)

        self._assign_ends(found, len(text))
        return [
            SectionPattern(
                title=f["title"],
                level=f["level"],
                start=f["start"],
                end=f["end"],
                kind=SectionKind.MARKDOWN,
            )
            for f in found
        ]

    def _detect_chapters(self, text: str) -> list[ChapterPattern]:
        def build(m: re.Match) -> dict[str, Any]:
            raw_number = m.group("number")
            number: Union[int, str] = (
                int(raw_number) if raw_number.isdigit() else raw_number.upper()
            )
            title = (m.group("title") or "").strip() or None
            return {"key": number, "number": number, "title": title}

        found = self._scan(text, self._chapter_regexes, build)
        self._assign_ends(found, len(text))
        return [
            ChapterPattern(number=f["number"], title=f["title"], start=f["start"], end=f["end"])
            for f in found
        ]

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def _scan(self, text: str, regexes: list[re.Pattern], build) -> list[dict[str, Any]]:
        """
        Run a regex table over the text.

        Matches with the same key within duplicate_window characters of an
        already accepted match are dropped. Returns entries sorted by start.
        """
        cap = self.config.max_patterns_per_type
        window = self.config.duplicate_window
        found: list[dict[str, Any]] = []

        for regex in regexes:
            for match in regex.finditer(text):
                if len(found) >= cap:
                    break
                entry = build(match)
                start = match.start("marker")
                duplicate = any(
                    f["key"] == entry["key"] and abs(f["start"] - start) < window
                    for f in found
                )
                if not duplicate:
                    entry["start"] = start
                    found.append(entry)

        found.sort(key=lambda f: f["start"])
        return found

    @staticmethod
    def _assign_ends(found: list[dict[str, Any]], text_length: int) -> None:
        for i, entry in enumerate(found):
            entry["end"] = found[i + 1]["start"] if i + 1 < len(found) else text_length

    @staticmethod
    def _extend_last(patterns: list, sample_length: int, document_length: int) -> list:
        if patterns and patterns[-1].end >= sample_length:
            patterns[-1] = patterns[-1].model_copy(update={"end": document_length})
        return patterns

    def _infer_document_type(
        self,
        articles: list[ArticlePattern],
        sections: list[SectionPattern],
        chapters: list[ChapterPattern],
    ) -> DocumentType:
        """Infer the document template from pattern counts."""
        if len(articles) >= self.config.regulatory_min_articles:
            return DocumentType.REGULATORY
        if len(chapters) >= self.config.manual_min_chapters:
            return DocumentType.MANUAL
        if len(sections) >= self.config.report_min_sections:
            return DocumentType.REPORT
        if articles and sections:
            return DocumentType.MIXED
        return DocumentType.UNKNOWN

    @staticmethod
    def _calculate_confidence(
        articles: list[ArticlePattern],
        sections: list[SectionPattern],
        chapters: list[ChapterPattern],
        doc_type: DocumentType,
    ) -> float:
        """
        Score how strongly the document matches a structured template.

        Components:
        - article density, up to 0.4 at 20 articles
        - article numbering order, up to 0.2 (0.1 for a single article)
        - section density, up to 0.3 at 30 sections
        - chapter density, up to 0.2 at 10 chapters
        - 0.1 bonus for a clear (non-mixed, non-unknown) type
        """
        if not articles and not sections and not chapters:
            return 0.0

        confidence = 0.0

        if articles:
            article_score = min(len(articles) / 20, 1.0) * 0.4
            if len(articles) > 1:
                increasing = sum(
                    1
                    for prev, curr in zip(articles, articles[1:])
                    if curr.number > prev.number
                )
                sequential_score = increasing / (len(articles) - 1) * 0.2
            else:
                sequential_score = 0.1
            confidence += article_score + sequential_score

        if sections:
            confidence += min(len(sections) / 30, 1.0) * 0.3

        if chapters:
            confidence += min(len(chapters) / 10, 1.0) * 0.2

        if doc_type not in (DocumentType.UNKNOWN, DocumentType.MIXED):
            confidence += 0.1

        return min(confidence, 1.0)


def detect_document_structure(
    text: str,
    format: Union[TextFormat, str, None] = TextFormat.PLAIN,
    config: Optional[DetectionConfig] = None,
) -> DocumentStructure:
    """Detect the structure of a document with a one-off StructureDetector."""
    return StructureDetector(config).detect(text, format)
