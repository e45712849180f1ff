from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .exceptions import StorageError
from .models import ChunkingResult


@dataclass
class ChunkingPaths:
    document_id: str
    chunk_dir: Path
    chunk_file: Path


class ChunkingStorage:
    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def build_paths(self, document_id: str) -> ChunkingPaths:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        chunk_dir = self.data_dir / document_id / "chunks"
        chunk_file = chunk_dir / f"{document_id}_{timestamp}.json"
        return ChunkingPaths(
            document_id=document_id,
            chunk_dir=chunk_dir,
            chunk_file=chunk_file,
        )

    def save(self, result: ChunkingResult) -> ChunkingPaths:
        paths = self.build_paths(result.document_id)
        try:
            paths.chunk_dir.mkdir(parents=True, exist_ok=True)
            result.save(str(paths.chunk_file))
        except OSError as e:
            raise StorageError(str(paths.chunk_file), e) from e
        return paths

    def latest(self, document_id: str) -> Path | None:
        """Most recently saved result file for a document, if any."""
        chunk_dir = self.data_dir / document_id / "chunks"
        if not chunk_dir.is_dir():
            return None
        files = sorted(chunk_dir.glob(f"{document_id}_*.json"))
        return files[-1] if files else None
