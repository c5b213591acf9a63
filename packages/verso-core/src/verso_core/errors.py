"""Exception types raised by the sync engine."""

from __future__ import annotations

from pathlib import Path


class SyncError(Exception):
    """Base class for every error the sync engine raises."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class NotFoundError(SyncError):
    """A root or entry does not exist on disk."""


class InvalidInputError(SyncError):
    """A root is not a directory, or a path lies outside its claimed root."""


class UnclassifiableError(SyncError):
    """A directory entry is neither a file, a directory nor a symlink."""


class SyncIOError(SyncError):
    """Reading or writing a file failed."""

    def __init__(self, path: Path | str, operation: str, cause: Exception) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed for {path}: {cause}", path)
        self.__cause__ = cause


class SerializationError(SyncError):
    """A state record could not be parsed or serialized."""

    def __init__(self, path: Path | str, cause: Exception) -> None:
        super().__init__(f"corrupt state record at {path}: {cause}", path)
        self.__cause__ = cause


class RenderError(SyncError):
    """The renderer or index builder failed; aborts the whole run."""

    def __init__(self, path: Path | str, operation: str, cause: Exception) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed for {path}: {cause}", path)
        self.__cause__ = cause
