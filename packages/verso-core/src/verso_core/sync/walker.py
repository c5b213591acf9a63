"""Differencing walk: compares live hashes to stored records."""

from __future__ import annotations

import logging
from collections import deque

from verso_core.sync.models import DirectoryNode, WorkItem
from verso_core.sync.store import StateStore

logger = logging.getLogger(__name__)


class DiffWalker:
    """Lazily yields one WorkItem per directory that needs a visit.

    Directories are visited breadth-first. A directory is only visited when
    its own recorded merkle hash differs from the live one, so an unchanged
    subtree costs a single record read for its top directory. The walker is
    single-use; ``visited`` grows as items are pulled.
    """

    def __init__(self, root: DirectoryNode, incremental: bool = True) -> None:
        self.root = root
        self.incremental = incremental
        self.visited: list[DirectoryNode] = []
        self._pending: deque[tuple[DirectoryNode, StateStore]] = deque()

        store = self._read(root)
        if store.merkle_matches(root.merkle_hash):
            logger.debug("Root %s unchanged, nothing to visit", root.source_path)
        else:
            self._pending.append((root, store))

    def __iter__(self) -> DiffWalker:
        return self

    def __next__(self) -> WorkItem:
        if not self._pending:
            raise StopIteration
        directory, store = self._pending.popleft()
        item = self._diff(directory, store)
        self.visited.append(directory)
        return item

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read(self, directory: DirectoryNode) -> StateStore:
        if not self.incremental:
            return StateStore()
        return StateStore.read(directory.output_path)

    def _diff(self, directory: DirectoryNode, store: StateStore) -> WorkItem:
        stale = [
            doc for doc in directory.documents
            if not store.content_matches(doc.rel_path, doc.content_hash)
        ]
        rebuild_index = not store.structural_matches(directory.structural_hash)

        descend: list[DirectoryNode] = []
        for child in directory.subdirectories:
            child_store = self._read(child)
            if child_store.merkle_matches(child.merkle_hash):
                logger.debug("Skipping unchanged subtree %s", child.rel_path)
                continue
            descend.append(child)
            self._pending.append((child, child_store))

        return WorkItem(
            directory=directory,
            stale_documents=stale,
            rebuild_index=rebuild_index,
            descend=descend,
        )


def walk(root: DirectoryNode, incremental: bool = True) -> DiffWalker:
    """Convenience wrapper around DiffWalker."""
    return DiffWalker(root, incremental=incremental)
