"""Synchronizer: renders the stale part of a source tree into the output tree."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from verso_core.config.models import SyncConfig
from verso_core.errors import RenderError, SyncIOError
from verso_core.interfaces import IgnoreMatcher, IndexBuilder, Renderer
from verso_core.sync.builder import TreeBuilder
from verso_core.sync.ignore import GlobIgnoreMatcher
from verso_core.sync.models import (
    DirectoryNode,
    DocumentNode,
    IndexEntry,
    LinkNode,
    PlainFileNode,
    SyncReport,
    WorkItem,
)
from verso_core.sync.store import StateStore
from verso_core.sync.walker import DiffWalker

logger = logging.getLogger(__name__)


class Synchronizer:
    """Mirrors ``config.source_dir`` into ``config.output_dir``.

    Each run rebuilds the source tree, walks only the directories whose
    merkle hash moved since the last run, renders stale documents, rebuilds
    indexes whose child list changed, and refreshes the state record of
    every visited directory. Any failure aborts the run before state records
    are written.
    """

    def __init__(
        self,
        config: SyncConfig,
        renderer: Renderer,
        index_builder: IndexBuilder,
        matcher: IgnoreMatcher | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.index_builder = index_builder
        self.source_root = Path(config.source_dir).expanduser().resolve()
        self.output_root = Path(config.output_dir).expanduser().resolve()
        self.matcher = matcher or GlobIgnoreMatcher(config.ignore, root=self.source_root)

    # -- Public API ----------------------------------------------------------

    def build(self) -> DirectoryNode:
        """Build and hash the live source tree."""
        return TreeBuilder(
            self.source_root,
            self.output_root,
            matcher=self.matcher,
            source_extension=self.config.source_extension,
            rendered_extension=self.config.rendered_extension,
        ).build()

    def plan(self) -> list[WorkItem]:
        """Work the next run would do, without touching the output tree."""
        return list(DiffWalker(self.build(), incremental=self.config.incremental))

    def run(self, dry_run: bool = False) -> SyncReport:
        """One sync pass. With *dry_run*, report the work but write nothing."""
        start = time.monotonic()
        report = SyncReport(dry_run=dry_run)

        if not dry_run:
            _ensure_dir(self.output_root)

        root = self.build()
        walker = DiffWalker(root, incremental=self.config.incremental)

        for item in walker:
            directory = item.directory
            report.visited.append(directory.rel_path or ".")
            if not dry_run:
                _ensure_dir(directory.output_path)

            for doc in item.stale_documents:
                if not dry_run:
                    self._render_document(doc)
                report.rendered.append(doc.rel_path)

            if item.rebuild_index:
                if not dry_run:
                    self._write_index(directory)
                report.indexed.append(directory.rel_path or ".")

        if not dry_run:
            for directory in walker.visited:
                StateStore.write(directory)
            logger.debug("Refreshed %d state record(s)", len(walker.visited))

        report.duration = time.monotonic() - start
        return report

    def index_entries(self, directory: DirectoryNode) -> list[IndexEntry]:
        """Children of *directory* with links resolved from its output location."""
        entries: list[IndexEntry] = []
        for child in sorted(directory.children, key=lambda c: c.name):
            if isinstance(child, DirectoryNode):
                href = f"{child.name}/{self.config.index_name}"
                entries.append(IndexEntry(name=child.name, href=href, kind="directory"))
            elif isinstance(child, DocumentNode):
                entries.append(
                    IndexEntry(name=child.name, href=child.output_path.name, kind="document")
                )
            elif isinstance(child, PlainFileNode):
                entries.append(
                    IndexEntry(name=child.name, href=child.source_path.as_uri(), kind="file")
                )
            elif isinstance(child, LinkNode):
                continue
        return entries

    # -- Internals -----------------------------------------------------------

    def _render_document(self, doc: DocumentNode) -> None:
        try:
            source = doc.source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SyncIOError(doc.source_path, "read", exc) from exc

        try:
            rendered = self.renderer.render(source)
        except Exception as exc:
            raise RenderError(doc.source_path, "render", exc) from exc

        _write_text(doc.output_path, rendered)
        logger.info("Rendered %s", doc.rel_path)

    def _write_index(self, directory: DirectoryNode) -> None:
        entries = self.index_entries(directory)
        try:
            page = self.index_builder.build(directory, entries)
        except Exception as exc:
            raise RenderError(directory.source_path, "index", exc) from exc

        _write_text(directory.output_path / self.config.index_name, page)
        logger.info("Rebuilt index for %s (%d entries)", directory.rel_path or ".", len(entries))


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SyncIOError(path, "create directory", exc) from exc


def _write_text(path: Path, content: str) -> None:
    # Names that are not valid UTF-8 are written back as their original bytes.
    try:
        path.write_text(content, encoding="utf-8", errors="surrogateescape")
    except (OSError, UnicodeEncodeError) as exc:
        raise SyncIOError(path, "write", exc) from exc
