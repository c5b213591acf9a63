"""Verso Core - incremental mirroring of a notes tree into rendered output."""

from verso_core.config import SyncConfig, VersoConfig
from verso_core.errors import SyncError
from verso_core.interfaces import IgnoreMatcher, IndexBuilder, Renderer
from verso_core.sync import GlobIgnoreMatcher, SyncReport, Synchronizer, build_tree

__version__ = "0.1.0"

__all__ = [
    "GlobIgnoreMatcher",
    "IgnoreMatcher",
    "IndexBuilder",
    "Renderer",
    "SyncConfig",
    "SyncError",
    "SyncReport",
    "Synchronizer",
    "VersoConfig",
    "build_tree",
]
