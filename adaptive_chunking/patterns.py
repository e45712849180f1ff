"""
Keyword tables for structural marker detection.

Each table entry is the body of a regex: it must match the marker itself
(keyword plus number) and may define a named group "number". The detector
anchors every body at the start of a line and requires the marker to be
followed by the end of the line or a terminator (".", ":", "-", en dash).
Matching is case-insensitive.

Tables are plain data so new languages or domain keywords can be added
through DetectionConfig without touching the detector.
"""

# Roman numerals up to 39, enough for part/chapter numbering.
ROMAN_NUMERAL = r"(?=[IVX])X{0,3}(?:IX|IV|V?I{0,3})"

# -----------------------------------------------------------------------------
# Articles
# -----------------------------------------------------------------------------

ARTICLE_PATTERNS: tuple[str, ...] = (
    # "Articolo 28", "Article 1", "Artikel 3", "Artículo 4"
    r"(?:Articolo|Article|Artikel|Art[íi]culo)[ \t]+(?P<number>\d+)",
    # "Art. 28", "Art 28"
    r"Art\.?[ \t]+(?P<number>\d+)",
)

# -----------------------------------------------------------------------------
# Textual sections (plain format)
# -----------------------------------------------------------------------------

ORDINALS_IT = (
    "Prima", "Seconda", "Terza", "Quarta", "Quinta",
    "Sesta", "Settima", "Ottava", "Nona", "Decima",
)
ORDINALS_EN = (
    "One", "Two", "Three", "Four", "Five",
    "Six", "Seven", "Eight", "Nine", "Ten",
)

SECTION_PATTERNS: tuple[str, ...] = (
    # "Sezione 1", "Section IV", "Parte II", "Part 3"
    r"(?:Sezione|Section|Parte|Part)[ \t]+(?P<number>\d+|" + ROMAN_NUMERAL + r")(?![A-Za-z])",
    # "Parte Prima", "Part Two"
    r"(?:Parte|Part)[ \t]+(?P<number>" + "|".join(ORDINALS_IT + ORDINALS_EN) + r")",
    # Privacy notices: "Informativa", "Informativa sul trattamento", ...
    r"Informativa(?:[ \t]+(?:sul|sulla|sui|sulle|breve|estesa|privacy|trattamento|dati|personali))*",
)

# -----------------------------------------------------------------------------
# Chapters
# -----------------------------------------------------------------------------

CHAPTER_PATTERNS: tuple[str, ...] = (
    # "Capitolo 1", "Chapter 12", "Kapitel 3"
    r"(?:Capitolo|Chapter|Kapitel)[ \t]+(?P<number>\d+)",
    # "Capitolo IV", "Chapter XII"
    r"(?:Capitolo|Chapter|Kapitel)[ \t]+(?P<number>" + ROMAN_NUMERAL + r")(?![A-Za-z])",
)

# Markdown ATX heading: "#".."######" followed by the title.
MARKDOWN_HEADING = r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$"
