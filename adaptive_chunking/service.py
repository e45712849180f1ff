import logging
from pathlib import Path
from typing import Optional, Union

from .chunker import AdaptiveChunker
from .config import ChunkingServiceConfig
from .exceptions import DocumentDecodeError, DocumentNotFoundError
from .models import (
    Chunk,
    ChunkingOptions,
    ChunkingResult,
    ChunkingStats,
    ChunkingStrategy,
    DocumentStructure,
    TextFormat,
)
from .preprocessing import preprocess_chunk_content
from .sentence_splitter import split_sentences
from .storage import ChunkingStorage
from .structure_detector import StructureDetector
from .token_counter import TokenCounter

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}


def make_document_id(source_file: str) -> str:
    """Generate a document ID from the source file path."""
    # Normalize Windows backslashes for cross-platform compatibility
    normalized = source_file.replace("\\", "/")
    return Path(normalized).stem or "document"


def resolve_format(path: str, format: Union[TextFormat, str, None] = None) -> TextFormat:
    """Explicit format if given, otherwise markdown for .md/.markdown files."""
    if format is not None:
        return TextFormat.coerce(format)
    if Path(path).suffix.lower() in MARKDOWN_SUFFIXES:
        return TextFormat.MARKDOWN
    return TextFormat.PLAIN


class ChunkingService:
    def __init__(
        self,
        config: ChunkingServiceConfig | None = None,
        token_counter: Optional[TokenCounter] = None,
    ):
        self.config = config or ChunkingServiceConfig()
        self.detector = StructureDetector(self.config.detection)
        self.chunker = AdaptiveChunker(token_counter, self.detector)
        self.storage = ChunkingStorage(self.config.data_dir)

    def chunk_text(
        self,
        text: str,
        format: Union[TextFormat, str, None] = None,
        options: ChunkingOptions | None = None,
        source_file: str = "",
        document_id: str = "document",
    ) -> ChunkingResult:
        """Detect structure, chunk, and wrap everything in a ChunkingResult."""
        options = options or self.config.options
        if format is not None:
            options = options.model_copy(update={"format": TextFormat.coerce(format)})

        structure = self.detector.detect(text, options.format)
        chunks = self.chunker.chunk(text, structure, options)
        if self.config.clean_content:
            chunks = self._clean(chunks)

        strategy = AdaptiveChunker.select_strategy(structure, options)
        return ChunkingResult(
            source_file=source_file,
            document_id=document_id,
            options=options,
            structure=structure,
            chunks=chunks,
            stats=self._compute_stats(chunks, text, strategy),
        )

    def detect_file(
        self,
        path: str,
        format: Union[TextFormat, str, None] = None,
    ) -> DocumentStructure:
        """Detect the structure of a .txt/.md file."""
        text = self._read_document(path)
        return self.detector.detect(text, resolve_format(path, format))

    def chunk_file(
        self,
        path: str,
        options: ChunkingOptions | None = None,
        format: Union[TextFormat, str, None] = None,
    ) -> ChunkingResult:
        """Chunk a .txt/.md file; the format follows the suffix unless given."""
        text = self._read_document(path)
        format = resolve_format(path, format)
        logger.info(f"Chunking {path} ({len(text)} chars, format: {format.value})")
        return self.chunk_text(
            text,
            format=format,
            options=options,
            source_file=str(path),
            document_id=make_document_id(str(path)),
        )

    def chunk_and_save(
        self,
        path: str,
        options: ChunkingOptions | None = None,
        format: Union[TextFormat, str, None] = None,
    ) -> tuple[ChunkingResult, str]:
        result = self.chunk_file(path, options=options, format=format)
        paths = self.storage.save(result)
        logger.info(f"Saved {result.total_chunks} chunks to {paths.chunk_file}")
        return result, str(paths.chunk_file)

    def load_latest(self, document_id: str) -> ChunkingResult | None:
        path = self.storage.latest(document_id)
        return ChunkingResult.load(str(path)) if path else None

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_document(path: str) -> str:
        source = Path(path)
        if not source.is_file():
            raise DocumentNotFoundError(str(path))
        try:
            return source.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            raise DocumentDecodeError(str(path), e) from e

    @staticmethod
    def _clean(chunks: list[Chunk]) -> list[Chunk]:
        """Apply content cleanup; chunks left empty are dropped and indices renumbered."""
        cleaned: list[Chunk] = []
        for chunk in chunks:
            content = preprocess_chunk_content(chunk.content)
            if content:
                cleaned.append(chunk.model_copy(
                    update={"content": content, "chunk_index": len(cleaned)}
                ))
        return cleaned

    @staticmethod
    def _compute_stats(
        chunks: list[Chunk],
        text: str,
        strategy: ChunkingStrategy,
    ) -> ChunkingStats:
        """Compute statistics about the chunking result."""
        if not chunks:
            return ChunkingStats(strategy=strategy)

        token_counts = [c.metadata.token_count for c in chunks]
        return ChunkingStats(
            total_chunks=len(chunks),
            total_tokens=sum(token_counts),
            avg_chunk_tokens=sum(token_counts) / len(token_counts),
            min_chunk_tokens=min(token_counts),
            max_chunk_tokens=max(token_counts),
            total_sentences=len(split_sentences(text)),
            strategy=strategy,
        )
