"""Glob-based ignore rules consulted while listing the source tree."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from pathlib import Path


class GlobIgnoreMatcher:
    """Matches entries against glob patterns and explicit excluded paths.

    A pattern without a slash (``*.tar.gz``, ``.git``) is tried against the
    entry's name, so it applies at any depth. A pattern with a slash is tried
    against the path relative to *root* when one is given.
    """

    def __init__(
        self,
        patterns: Iterable[str] = (),
        root: Path | None = None,
        excluded: Iterable[Path] = (),
    ) -> None:
        self.patterns = list(patterns)
        self.root = root.resolve() if root is not None else None
        self._excluded = {p.resolve() for p in excluded}

    def exclude(self, path: Path) -> None:
        """Always ignore *path*, whatever the patterns say."""
        self._excluded.add(path.resolve())

    def is_ignored(self, path: Path) -> bool:
        # Entries are never resolved: a symlink must match by its own name.
        if path in self._excluded:
            return True
        name = path.name
        rel: str | None = None
        if self.root is not None:
            try:
                rel = path.relative_to(self.root).as_posix()
            except ValueError:
                rel = None
        for pattern in self.patterns:
            if "/" not in pattern:
                if fnmatch.fnmatchcase(name, pattern):
                    return True
            elif rel is not None and fnmatch.fnmatchcase(rel, pattern.lstrip("/")):
                return True
        return False
