"""Classify filesystem entries into tree nodes."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from verso_core.errors import InvalidInputError, NotFoundError, SyncIOError, UnclassifiableError
from verso_core.sync.hashing import compute_file_hash
from verso_core.sync.models import DirectoryNode, DocumentNode, LinkNode, Node, PlainFileNode


def relative_path(path: Path, source_root: Path) -> str:
    """Return *path* relative to *source_root* in POSIX form ("" for the root)."""
    try:
        rel = path.relative_to(source_root)
    except ValueError as exc:
        raise InvalidInputError(
            f"cannot strip prefix {source_root} of path {path}", path
        ) from exc
    return "" if rel == Path(".") else rel.as_posix()


def output_path_for(path: Path, source_root: Path, output_root: Path) -> Path:
    """Mirror *path* from the source tree into the output tree."""
    rel = relative_path(path, source_root)
    return output_root / rel if rel else output_root


def is_source_document(path: Path, source_extension: str) -> bool:
    return path.suffix == f".{source_extension}"


def classify(
    path: Path,
    source_root: Path,
    output_root: Path,
    source_extension: str = "md",
    rendered_extension: str = "html",
) -> Node:
    """Build the node for *path*.

    Symlinks are detected with ``lstat`` and never followed. Regular files
    with the source extension become documents and are hashed right away.
    """
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError as exc:
        raise NotFoundError(f"no such entry: {path}", path) from exc
    except OSError as exc:
        raise SyncIOError(path, "stat", exc) from exc

    rel = relative_path(path, source_root)

    if stat.S_ISLNK(mode):
        return LinkNode(source_path=path, rel_path=rel)
    if stat.S_ISDIR(mode):
        return DirectoryNode(
            source_path=path,
            output_path=output_path_for(path, source_root, output_root),
            rel_path=rel,
        )
    if stat.S_ISREG(mode):
        if not is_source_document(path, source_extension):
            return PlainFileNode(source_path=path, rel_path=rel)
        output = output_path_for(path, source_root, output_root)
        return DocumentNode(
            source_path=path,
            output_path=output.with_suffix(f".{rendered_extension}"),
            rel_path=rel,
            content_hash=compute_file_hash(path),
        )
    raise UnclassifiableError(f"unknown file type at path {path}", path)
