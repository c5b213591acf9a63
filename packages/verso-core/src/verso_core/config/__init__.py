from .models import (
    DEFAULT_IGNORE,
    RenderConfig,
    SyncConfig,
    VersoConfig,
    WatchConfig,
)

__all__ = [
    "DEFAULT_IGNORE",
    "RenderConfig",
    "SyncConfig",
    "VersoConfig",
    "WatchConfig",
]
