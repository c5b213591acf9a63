"""Content, structural and merkle hashes for the source tree."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from pathlib import Path

from verso_core.errors import NotFoundError, SyncIOError
from verso_core.sync.models import DirectoryNode, DocumentNode

# 8-byte digests, rendered as 16 hex chars.
DIGEST_SIZE = 8


def compute_hash(content: bytes) -> str:
    """BLAKE2b hash with a 64-bit digest, as 16 hex characters."""
    return hashlib.blake2b(content, digest_size=DIGEST_SIZE).hexdigest()


def compute_file_hash(path: Path) -> str:
    """Read a file from disk and hash its raw bytes."""
    try:
        return compute_hash(path.read_bytes())
    except FileNotFoundError as exc:
        raise NotFoundError(f"file not found: {path}", path) from exc
    except OSError as exc:
        raise SyncIOError(path, "hash", exc) from exc


def encode_path(rel_path: str) -> bytes:
    """Raw bytes of a path string, including names that are not valid UTF-8.

    On POSIX such names come back from ``os.scandir`` with lone surrogates.
    """
    return rel_path.encode("utf-8", "surrogateescape")


def compute_structural_hash(rel_paths: Iterable[str]) -> str:
    """Hash the ordered sequence of a directory's direct-child paths.

    Only identities count here, never content. Paths are NUL-separated so
    that ``["ab"]`` and ``["a", "b"]`` cannot collide.
    """
    return compute_hash(b"\0".join(encode_path(p) for p in rel_paths))


def compute_merkle_hash(structural_hash: str, child_hashes: Iterable[str]) -> str:
    """Fold child hashes, in order, into a directory's structural hash."""
    current = structural_hash
    for child_hash in child_hashes:
        current = compute_hash(f"{current}{child_hash}".encode("ascii"))
    return current


def hash_directory(directory: DirectoryNode) -> None:
    """Set ``structural_hash`` and ``merkle_hash`` on *directory*.

    Child directories must already carry their own merkle hash, so callers
    hash a tree deepest-first.
    """
    directory.structural_hash = compute_structural_hash(
        child.rel_path for child in directory.children
    )
    contributions: list[str] = []
    for child in directory.children:
        if isinstance(child, DirectoryNode):
            contributions.append(child.merkle_hash)
        elif isinstance(child, DocumentNode):
            contributions.append(child.content_hash)
        # plain files and links contribute nothing
    directory.merkle_hash = compute_merkle_hash(directory.structural_hash, contributions)


def hash_tree(root: DirectoryNode) -> None:
    """Hash every directory under *root*, children before parents."""
    for directory in reversed(list(root.iter_directories())):
        hash_directory(directory)
