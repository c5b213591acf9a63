"""Collaborator interfaces consumed by the sync engine."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from verso_core.sync.models import DirectoryNode, IndexEntry


@runtime_checkable
class Renderer(Protocol):
    """Turns one document's source text into its rendered page."""

    def render(self, source: str) -> str: ...


@runtime_checkable
class IndexBuilder(Protocol):
    """Renders the index page listing a directory's children."""

    def build(self, directory: DirectoryNode, entries: list[IndexEntry]) -> str: ...


@runtime_checkable
class IgnoreMatcher(Protocol):
    """Decides which entries are left out of the source tree."""

    def is_ignored(self, path: Path) -> bool: ...
