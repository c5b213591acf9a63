"""Builder for the in-memory source tree."""

from __future__ import annotations

import logging
import os
from collections import deque
from pathlib import Path

from verso_core.errors import InvalidInputError, NotFoundError, SyncError
from verso_core.interfaces import IgnoreMatcher
from verso_core.sync.classifier import classify
from verso_core.sync.hashing import hash_tree
from verso_core.sync.models import DirectoryNode, Node
from verso_core.sync.store import STATE_FILE_NAME

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Walks a source directory into a hashed tree of owned nodes."""

    def __init__(
        self,
        source_root: Path,
        output_root: Path,
        matcher: IgnoreMatcher | None = None,
        source_extension: str = "md",
        rendered_extension: str = "html",
    ) -> None:
        self.source_root = Path(source_root).resolve()
        self.output_root = Path(output_root).resolve()
        self.matcher = matcher
        self.source_extension = source_extension
        self.rendered_extension = rendered_extension

    def build(self) -> DirectoryNode:
        """Expand the whole tree breadth-first, then hash it bottom-up.

        Raises NotFoundError if the root is missing and InvalidInputError if
        it is not a directory. Problems with individual entries are logged
        and the entry is left out.
        """
        if not self.source_root.exists():
            raise NotFoundError(f"source root not found: {self.source_root}", self.source_root)
        root = self._classify(self.source_root)
        if not isinstance(root, DirectoryNode):
            raise InvalidInputError(
                f"cannot create directory tree from file at path {self.source_root}",
                self.source_root,
            )

        pending: deque[DirectoryNode] = deque([root])
        while pending:
            directory = pending.popleft()
            directory.children = self._list_children(directory.source_path)
            pending.extend(directory.subdirectories)

        hash_tree(root)
        return root

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _classify(self, path: Path) -> Node:
        return classify(
            path,
            self.source_root,
            self.output_root,
            source_extension=self.source_extension,
            rendered_extension=self.rendered_extension,
        )

    def _list_children(self, path: Path) -> list[Node]:
        try:
            with os.scandir(path) as it:
                names = sorted(entry.name for entry in it)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", path, exc)
            return []

        children: list[Node] = []
        for name in names:
            entry_path = path / name
            if name == STATE_FILE_NAME or self._is_ignored(entry_path):
                continue
            try:
                children.append(self._classify(entry_path))
            except SyncError as exc:
                logger.debug("Skipping %s: %s", entry_path, exc)
        return children

    def _is_ignored(self, path: Path) -> bool:
        if path == self.output_root:
            return True
        return self.matcher is not None and self.matcher.is_ignored(path)


def build_tree(
    source_root: Path,
    output_root: Path,
    matcher: IgnoreMatcher | None = None,
    source_extension: str = "md",
    rendered_extension: str = "html",
) -> DirectoryNode:
    """Convenience wrapper around TreeBuilder.build()."""
    return TreeBuilder(
        source_root,
        output_root,
        matcher=matcher,
        source_extension=source_extension,
        rendered_extension=rendered_extension,
    ).build()
