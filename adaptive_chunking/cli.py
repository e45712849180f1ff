"""
Adaptive Chunking - command line interface.

Detects the structure of extracted text files and chunks them for the
retrieval pipeline.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config import ChunkingServiceConfig
from .exceptions import ChunkingError, format_error_chain
from .logging_config import get_logger, level_from_flags, setup_logging
from .models import ChunkingOptions, ChunkingResult, DocumentStructure
from .service import ChunkingService

logger = get_logger(__name__)


def print_structure(path: Path, structure: DocumentStructure) -> None:
    """Print a summary of the detected structure."""
    print("\n" + "=" * 60)
    print("STRUCTURE")
    print("=" * 60)
    print(f"File: {path}")
    print(f"Type: {structure.type.value}")
    print(f"Confidence: {structure.confidence:.2f}{' (sampled)' if structure.sampled else ''}")
    print(f"Articles: {len(structure.articles)}")
    print(f"Sections: {len(structure.sections)}")
    print(f"Chapters: {len(structure.chapters)}")

    if structure.chapters:
        print("\nChapters:")
        for chapter in structure.chapters:
            title = f": {chapter.title}" if chapter.title else ""
            print(f"  {chapter.number}{title}")

    if structure.sections:
        print("\nSections:")
        for section in structure.sections[:20]:
            indent = "  " * (section.level or 1)
            print(f"{indent}{section.title}")
        if len(structure.sections) > 20:
            print(f"  ... ({len(structure.sections) - 20} more)")


def print_summary(result: ChunkingResult, output_file: str) -> None:
    """Print a summary of the chunking result."""
    stats = result.stats
    print("\n" + "=" * 60)
    print("CHUNKING SUMMARY")
    print("=" * 60)
    print(f"Document: {result.document_id}")
    print(f"Strategy: {stats.strategy.value if stats.strategy else 'none'}")
    print(f"Structure: {result.structure.summary()}")
    print(f"Chunks: {stats.total_chunks}")
    print(f"Tokens: {stats.total_tokens} (avg {stats.avg_chunk_tokens:.0f}, "
          f"min {stats.min_chunk_tokens}, max {stats.max_chunk_tokens})")
    print(f"Sentences: {stats.total_sentences}")
    print(f"Output: {output_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adaptive-chunking",
        description="Detect document structure and chunk text for RAG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s detect regolamento.txt
  %(prog)s chunk regolamento.txt -o data/chunking
  %(prog)s chunk manual.md --max 512 --target 400 --min 150 --clean
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log records to this file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Print the detected document structure")
    detect.add_argument("file", type=Path, help="Text or markdown file")
    detect.add_argument(
        "--format",
        choices=["plain", "markdown"],
        default=None,
        help="Text format (default: from the file suffix)"
    )

    chunk = subparsers.add_parser("chunk", help="Chunk a file and save the result as JSON")
    chunk.add_argument("file", type=Path, help="Text or markdown file")
    chunk.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("data/chunking"),
        help="Data directory (default: data/chunking)"
    )
    chunk.add_argument("--target", type=int, default=350, help="Target tokens per chunk (default: 350)")
    chunk.add_argument("--max", type=int, default=450, help="Maximum tokens per chunk (default: 450)")
    chunk.add_argument("--min", type=int, default=200, help="Minimum tokens per chunk (default: 200)")
    chunk.add_argument(
        "--format",
        choices=["plain", "markdown"],
        default=None,
        help="Text format (default: from the file suffix)"
    )
    chunk.add_argument(
        "--no-structure",
        action="store_true",
        help="Don't chunk markdown documents section by section"
    )
    chunk.add_argument(
        "--clean",
        action="store_true",
        help="Remove page counters and decorative characters from chunk content"
    )
    return parser


def _run_detect(args: argparse.Namespace) -> int:
    structure = ChunkingService().detect_file(str(args.file), format=args.format)
    if not args.quiet:
        print_structure(args.file, structure)
    return 0


def _run_chunk(args: argparse.Namespace) -> int:
    try:
        options = ChunkingOptions(
            target_tokens=args.target,
            max_tokens=args.max,
            min_tokens=args.min,
            preserve_structure=not args.no_structure,
        )
    except ValueError as e:
        logger.error(f"Invalid options: {e}")
        return 1

    config = ChunkingServiceConfig(
        data_dir=str(args.output),
        options=options,
        clean_content=args.clean,
    )
    service = ChunkingService(config)
    result, output_file = service.chunk_and_save(str(args.file), format=args.format)
    if not args.quiet:
        print_summary(result, output_file)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(level=level_from_flags(args.verbose, args.quiet), log_file=args.log_file)

    try:
        if args.command == "detect":
            return _run_detect(args)
        return _run_chunk(args)
    except ChunkingError as e:
        logger.error(format_error_chain(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
