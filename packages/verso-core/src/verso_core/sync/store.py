"""Per-directory hash records persisted next to the rendered output."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from verso_core.errors import NotFoundError, SerializationError, SyncError, SyncIOError
from verso_core.sync.hashing import encode_path

if TYPE_CHECKING:
    from verso_core.sync.models import DirectoryNode

logger = logging.getLogger(__name__)

# Reserved name; never produced by rendering a document or an index.
STATE_FILE_NAME = ".verso-state.json"


def record_key(rel_path: str) -> str:
    """JSON-safe key for a document path; undecodable bytes become ``\\xNN``."""
    return encode_path(rel_path).decode("utf-8", "backslashreplace")


class StateRecord(BaseModel):
    """Hash snapshot of one directory as of the last sync."""

    version: int = 1
    merkle_hash: str
    structural_hash: str
    sources: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_directory(cls, directory: DirectoryNode) -> StateRecord:
        return cls(
            merkle_hash=directory.merkle_hash,
            structural_hash=directory.structural_hash,
            sources={record_key(doc.rel_path): doc.content_hash for doc in directory.documents},
        )

    @classmethod
    def load(cls, path: Path) -> StateRecord:
        """Read a record from *path*.

        Raises NotFoundError, SyncIOError or SerializationError.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"no state record at {path}", path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SyncIOError(path, "read state", exc) from exc
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise SerializationError(path, exc) from exc

    def save(self, path: Path) -> None:
        try:
            path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise SyncIOError(path, "write state", exc) from exc


def state_path(output_dir: Path) -> Path:
    """Where the record for the directory rendered into *output_dir* lives."""
    return output_dir / STATE_FILE_NAME


class StateStore:
    """Read-side view over an optional record.

    Every comparison answers False when there is no record, so a first run
    (or a corrupt record) rebuilds everything in that directory.
    """

    def __init__(self, record: StateRecord | None = None) -> None:
        self.record = record

    @classmethod
    def read(cls, output_dir: Path) -> StateStore:
        path = state_path(output_dir)
        try:
            return cls(StateRecord.load(path))
        except NotFoundError:
            return cls()
        except SyncError as exc:
            logger.warning("Ignoring unreadable state record: %s", exc)
            return cls()

    @staticmethod
    def write(directory: DirectoryNode) -> Path:
        """Snapshot *directory* into its output location, replacing any prior record."""
        path = state_path(directory.output_path)
        StateRecord.from_directory(directory).save(path)
        return path

    @property
    def exists(self) -> bool:
        return self.record is not None

    def merkle_matches(self, merkle_hash: str) -> bool:
        return self.record is not None and self.record.merkle_hash == merkle_hash

    def structural_matches(self, structural_hash: str) -> bool:
        return self.record is not None and self.record.structural_hash == structural_hash

    def content_matches(self, rel_path: str, content_hash: str) -> bool:
        if self.record is None:
            return False
        return self.record.sources.get(record_key(rel_path)) == content_hash
