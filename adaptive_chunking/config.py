from dataclasses import dataclass, field

from .models import ChunkingOptions
from .patterns import ARTICLE_PATTERNS, CHAPTER_PATTERNS, SECTION_PATTERNS


@dataclass
class DetectionConfig:
    # Document type inference
    regulatory_min_articles: int = 5
    manual_min_chapters: int = 3
    report_min_sections: int = 10

    # Limits for adversarial or very large input
    max_patterns_per_type: int = 1000
    duplicate_window: int = 50
    large_document_threshold: int = 5 * 1024 * 1024
    sample_size: int = 500 * 1024
    sampling_penalty: float = 0.9

    # End the last article at the first blank line this many characters
    # after its start instead of at the document end.
    trim_last_article_at_blank_line: bool = False
    last_article_min_span: int = 100

    article_patterns: tuple[str, ...] = ARTICLE_PATTERNS
    section_patterns: tuple[str, ...] = SECTION_PATTERNS
    chapter_patterns: tuple[str, ...] = CHAPTER_PATTERNS


@dataclass
class ChunkingServiceConfig:
    data_dir: str = "data/chunking"
    options: ChunkingOptions = field(default_factory=ChunkingOptions)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    clean_content: bool = False
