"""File watcher that reruns a sync after the source tree settles."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from verso_core.interfaces import IgnoreMatcher

logger = logging.getLogger(__name__)


class _DebouncedHandler(FileSystemEventHandler):
    """Records the time of the last relevant event; the watcher polls it."""

    def __init__(
        self, root: Path, matcher: IgnoreMatcher | None, lock: threading.Lock
    ) -> None:
        super().__init__()
        self._root = root
        self._matcher = matcher
        self._lock = lock
        self.last_event: float | None = None

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        if self._should_ignore(event.src_path):
            return
        with self._lock:
            self.last_event = time.monotonic()

    def _should_ignore(self, src: str | bytes) -> bool:
        if self._matcher is None:
            return False
        if isinstance(src, bytes):
            src = src.decode()
        path = Path(src)
        # An ignored ancestor below the root hides the whole subtree.
        candidates = [path, *path.parents]
        return any(
            self._matcher.is_ignored(p)
            for p in candidates
            if p != self._root and p.is_relative_to(self._root)
        )


class SyncWatcher:
    """Watches a source tree and calls *on_change* once per quiet period.

    Editors tend to emit bursts of events per save (temp file, rename,
    modify), so *on_change* only fires after ``debounce_seconds`` without
    new events.
    """

    def __init__(
        self,
        source_root: Path,
        on_change: Callable[[], None],
        debounce_seconds: float = 1.0,
        matcher: IgnoreMatcher | None = None,
    ) -> None:
        self._source_root = Path(source_root).resolve()
        self._on_change = on_change
        self._debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._handler = _DebouncedHandler(self._source_root, matcher, self._lock)
        self._observer: Observer | None = None

    def start(self) -> None:
        """Begin watching the source tree recursively."""
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._source_root), recursive=True)
        self._observer.start()
        logger.info("Watching %s for changes", self._source_root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self._source_root)

    def poll(self) -> bool:
        """Fire *on_change* if events are pending and have settled.

        Returns True when the callback ran.
        """
        with self._lock:
            last = self._handler.last_event
            if last is None or time.monotonic() - last < self._debounce_seconds:
                return False
            self._handler.last_event = None
        self._on_change()
        return True

    def run_forever(self, interval: float = 0.25) -> None:
        """Poll until interrupted with Ctrl+C."""
        self.start()
        try:
            while True:
                self.poll()
                time.sleep(interval)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
