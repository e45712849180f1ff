"""
Adaptive Chunking - Structure detection and token-budgeted chunking for RAG

Detects articles, sections and chapters in extracted document text and
splits the text into sentence-aligned chunks that keep those structures
intact when the document has them.

Quick Start:
    from adaptive_chunking import ChunkingOptions, adaptive_chunking
    from adaptive_chunking import detect_document_structure

    structure = detect_document_structure(text, "plain")
    chunks = adaptive_chunking(text, structure, ChunkingOptions(max_tokens=512))
"""

__version__ = "1.0.0"

from .chunker import AdaptiveChunker, adaptive_chunking
from .config import ChunkingServiceConfig, DetectionConfig
from .exceptions import (
    ChunkingError,
    DocumentDecodeError,
    DocumentError,
    DocumentNotFoundError,
    StorageError,
    format_error_chain,
)
from .models import (
    ArticlePattern,
    ArticleType,
    ChapterPattern,
    Chunk,
    ChunkingOptions,
    ChunkingResult,
    ChunkingStats,
    ChunkingStrategy,
    ChunkMetadata,
    ContentType,
    DocumentStructure,
    DocumentType,
    SectionKind,
    SectionPattern,
    TextFormat,
)
from .packer import ChunkPacker
from .preprocessing import preprocess_chunk_content
from .sentence_splitter import normalize_whitespace, split_sentences
from .service import ChunkingService
from .structure_detector import StructureDetector, detect_document_structure
from .token_counter import (
    ApproximateTokenCounter,
    TiktokenCounter,
    TokenCounter,
    count_tokens,
    count_tokens_batch,
)

__all__ = [
    "__version__",
    # Core
    "AdaptiveChunker",
    "adaptive_chunking",
    "StructureDetector",
    "detect_document_structure",
    "ChunkPacker",
    "split_sentences",
    "normalize_whitespace",
    "preprocess_chunk_content",
    # Token counting
    "TokenCounter",
    "TiktokenCounter",
    "ApproximateTokenCounter",
    "count_tokens",
    "count_tokens_batch",
    # Service
    "ChunkingService",
    "ChunkingServiceConfig",
    "DetectionConfig",
    # Models
    "ArticlePattern",
    "ArticleType",
    "ChapterPattern",
    "Chunk",
    "ChunkingOptions",
    "ChunkingResult",
    "ChunkingStats",
    "ChunkingStrategy",
    "ChunkMetadata",
    "ContentType",
    "DocumentStructure",
    "DocumentType",
    "SectionKind",
    "SectionPattern",
    "TextFormat",
    # Exceptions
    "ChunkingError",
    "DocumentError",
    "DocumentNotFoundError",
    "DocumentDecodeError",
    "StorageError",
    "format_error_chain",
]
