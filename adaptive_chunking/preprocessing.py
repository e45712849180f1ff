"""
Chunk content cleanup before storage.

Removes non-informative characters and repeated page furniture from chunk
text to improve full-text search over stored chunks. Runs after chunking,
so chunk boundaries and metadata are unaffected.

Usage:
    from adaptive_chunking.preprocessing import preprocess_chunk_content

    preprocess_chunk_content("Pagina 1/10\\n\\n\\n\\nArticolo 1")
    # "Articolo 1"
"""

import re

# Page counters: "Pagina 1/10", "Page 3 of 12", bare "4/10" lines.
_PAGE_COUNTER_IT = re.compile(r"pagina\s+\d+\s*/\s*\d+", re.IGNORECASE)
_PAGE_COUNTER_EN = re.compile(r"page\s+\d+\s+of\s+\d+", re.IGNORECASE)
_PAGE_FRACTION_LINE = re.compile(r"^\d+\s*/\s*\d+\s*$", re.MULTILINE)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SPACE_RUN = re.compile(r"[ \t]{2,}")

# Control characters (newline and tab kept), DEL and byte order mark.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F\ufeff]")

# Decorative bullet glyphs left over from PDF extraction.
_BULLET_GLYPHS = re.compile(r"[•●○◦►▸▪▫■□▲▼◆◇]")

_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,;:!?])")


def preprocess_chunk_content(content: str) -> str:
    """
    Clean and normalize chunk content.

    Args:
        content: Chunk text as produced by the chunker.

    Returns:
        Cleaned text (may be empty if the chunk held only page furniture).
    """
    cleaned = _PAGE_COUNTER_IT.sub("", content)
    cleaned = _PAGE_COUNTER_EN.sub("", cleaned)
    cleaned = _PAGE_FRACTION_LINE.sub("", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _BULLET_GLYPHS.sub("", cleaned)
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
    cleaned = _SPACE_RUN.sub(" ", cleaned)
    cleaned = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", cleaned)
    return cleaned.strip()
