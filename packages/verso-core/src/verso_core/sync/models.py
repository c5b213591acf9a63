"""Data models for the source/output tree and the sync results."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, Field


@dataclass
class DocumentNode:
    """A renderable source file (Markdown by default)."""

    source_path: Path
    output_path: Path
    rel_path: str
    content_hash: str

    @property
    def name(self) -> str:
        return self.source_path.name


@dataclass
class PlainFileNode:
    """A regular file that is neither hashed nor rendered."""

    source_path: Path
    rel_path: str

    @property
    def name(self) -> str:
        return self.source_path.name


@dataclass
class LinkNode:
    """A symbolic link. Never followed."""

    source_path: Path
    rel_path: str

    @property
    def name(self) -> str:
        return self.source_path.name


@dataclass
class DirectoryNode:
    """A directory owning its children.

    ``structural_hash`` and ``merkle_hash`` are empty until the tree
    builder has hashed the subtree.
    """

    source_path: Path
    output_path: Path
    rel_path: str
    children: list[Node] = field(default_factory=list)
    structural_hash: str = ""
    merkle_hash: str = ""

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def subdirectories(self) -> list[DirectoryNode]:
        return [c for c in self.children if isinstance(c, DirectoryNode)]

    @property
    def documents(self) -> list[DocumentNode]:
        return [c for c in self.children if isinstance(c, DocumentNode)]

    def iter_directories(self):
        """Yield this directory and every descendant directory, breadth-first."""
        queue = deque([self])
        while queue:
            current = queue.popleft()
            yield current
            queue.extend(current.subdirectories)


Node = Union[DirectoryNode, DocumentNode, PlainFileNode, LinkNode]


@dataclass(frozen=True)
class IndexEntry:
    """One line of a directory index, with its output link resolved."""

    name: str
    href: str
    kind: Literal["directory", "document", "file"]


@dataclass
class WorkItem:
    """What the differencing walk decided for one visited directory."""

    directory: DirectoryNode
    stale_documents: list[DocumentNode] = field(default_factory=list)
    rebuild_index: bool = False
    descend: list[DirectoryNode] = field(default_factory=list)

    @property
    def has_work(self) -> bool:
        return bool(self.stale_documents) or self.rebuild_index


class SyncReport(BaseModel):
    """Outcome of one sync run."""

    rendered: list[str] = Field(default_factory=list)
    indexed: list[str] = Field(default_factory=list)
    visited: list[str] = Field(default_factory=list)
    dry_run: bool = False
    duration: float = 0.0

    @property
    def up_to_date(self) -> bool:
        return not self.rendered and not self.indexed
