"""Incremental sync subsystem: tree model, hashing, state records, diff walk."""

from __future__ import annotations

from verso_core.config.models import SyncConfig
from verso_core.interfaces import IgnoreMatcher, IndexBuilder, Renderer
from verso_core.sync.builder import TreeBuilder, build_tree
from verso_core.sync.classifier import classify, output_path_for
from verso_core.sync.engine import Synchronizer
from verso_core.sync.hashing import (
    compute_file_hash,
    compute_hash,
    compute_merkle_hash,
    compute_structural_hash,
    hash_directory,
)
from verso_core.sync.ignore import GlobIgnoreMatcher
from verso_core.sync.models import (
    DirectoryNode,
    DocumentNode,
    IndexEntry,
    LinkNode,
    Node,
    PlainFileNode,
    SyncReport,
    WorkItem,
)
from verso_core.sync.store import STATE_FILE_NAME, StateRecord, StateStore
from verso_core.sync.walker import DiffWalker, walk


def sync(
    config: SyncConfig,
    renderer: Renderer,
    index_builder: IndexBuilder,
    matcher: IgnoreMatcher | None = None,
    *,
    dry_run: bool = False,
) -> SyncReport:
    """Convenience wrapper around Synchronizer(...).run()."""
    return Synchronizer(config, renderer, index_builder, matcher).run(dry_run=dry_run)


__all__ = [
    "DiffWalker",
    "DirectoryNode",
    "DocumentNode",
    "GlobIgnoreMatcher",
    "IndexEntry",
    "LinkNode",
    "Node",
    "PlainFileNode",
    "STATE_FILE_NAME",
    "StateRecord",
    "StateStore",
    "SyncReport",
    "Synchronizer",
    "TreeBuilder",
    "WorkItem",
    "build_tree",
    "classify",
    "compute_file_hash",
    "compute_hash",
    "compute_merkle_hash",
    "compute_structural_hash",
    "hash_directory",
    "output_path_for",
    "sync",
    "walk",
]
