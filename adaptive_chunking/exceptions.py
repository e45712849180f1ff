"""
Custom Exceptions for the Adaptive Chunking Service.

The chunking core itself never raises on string input: missing structure,
oversized sentences and huge documents all degrade gracefully. These
exceptions cover the service layer around it (reading source documents,
persisting results).

Exception Hierarchy:
    ChunkingError (base)
    ├── DocumentError
    │   ├── DocumentNotFoundError
    │   └── DocumentDecodeError
    └── StorageError

Usage:
    from adaptive_chunking.exceptions import ChunkingError, DocumentNotFoundError

    try:
        result = service.chunk_file("regolamento.txt")
    except DocumentNotFoundError as e:
        print(f"File not found: {e.path}")
    except ChunkingError as e:
        print(f"Chunking failed: {e}")
"""

from __future__ import annotations

from typing import Optional


class ChunkingError(Exception):
    """
    Base exception for all chunking-service errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "A chunking error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


class DocumentError(ChunkingError):
    """Base class for source document errors."""

    def __init__(
        self,
        message: str = "Document error",
        path: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.path = path
        if path:
            message = f"{message} [{path}]"
        super().__init__(message, details)


class DocumentNotFoundError(DocumentError):
    """Raised when the source text file does not exist."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Document not found: {path}",
            path=path,
        )


class DocumentDecodeError(DocumentError):
    """
    Raised when the source file is not readable as UTF-8 text.

    Attributes:
        original_error: The underlying decode or OS error
    """

    def __init__(
        self,
        path: str,
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message=f"Document is not readable as text: {path}",
            path=path,
            details=details,
        )


class StorageError(ChunkingError):
    """
    Raised when a chunking result cannot be written to the data directory.

    Attributes:
        path: Target path of the failed write
        original_error: The underlying OS error
    """

    def __init__(
        self,
        path: str,
        original_error: Optional[Exception] = None,
    ):
        self.path = path
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(f"Failed to save chunking result: {path}", details)


def _causes(error: BaseException):
    """Yield error, then its causes: original_error first, else __cause__."""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = getattr(current, "original_error", None) or current.__cause__


def format_error_chain(error: BaseException) -> str:
    """
    Render an error and its causes one per line, each cause indented under
    the error that wrapped it. A cause chain that loops back is cut at the
    first repeated error.
    """
    return "\n".join(
        ("  " * depth + "└─ " if depth else "") + f"{type(cause).__name__}: {cause}"
        for depth, cause in enumerate(_causes(error))
    )
