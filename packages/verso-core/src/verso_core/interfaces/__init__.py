"""Plugin interfaces for the renderer, index builder and ignore rules."""

from verso_core.interfaces.renderer import IgnoreMatcher, IndexBuilder, Renderer

__all__ = [
    "IgnoreMatcher",
    "IndexBuilder",
    "Renderer",
]
