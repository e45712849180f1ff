from pathlib import Path

import pytest

from adaptive_chunking.exceptions import StorageError
from adaptive_chunking.models import ChunkingOptions, ChunkingResult
from adaptive_chunking.storage import ChunkingStorage


def _result(document_id: str = "example") -> ChunkingResult:
    return ChunkingResult(
        source_file="docs/example.txt",
        document_id=document_id,
        options=ChunkingOptions(),
        chunks=[],
    )


def test_chunking_storage_paths(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path))
    paths = storage.save(_result())

    assert paths.document_id == "example"
    assert paths.chunk_file.exists()
    assert paths.chunk_dir == tmp_path / "example" / "chunks"
    assert paths.chunk_file.name.startswith("example_")
    assert paths.chunk_file.suffix == ".json"


def test_build_paths_does_not_create_directories(tmp_path: Path) -> None:
    paths = ChunkingStorage(str(tmp_path)).build_paths("example")
    assert not paths.chunk_dir.exists()


def test_latest(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path))
    assert storage.latest("example") is None

    paths = storage.save(_result())
    assert storage.latest("example") == paths.chunk_file


def test_save_failure_raises_storage_error(tmp_path: Path) -> None:
    # A file where the data directory should be makes mkdir fail.
    blocker = tmp_path / "blocked"
    blocker.write_text("x", encoding="utf-8")
    storage = ChunkingStorage(str(blocker))

    with pytest.raises(StorageError) as exc_info:
        storage.save(_result())
    assert exc_info.value.original_error is not None
