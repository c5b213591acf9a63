from pydantic import BaseModel, Field
from typing import Literal

# Globs skipped during every walk unless the user overrides `sync.ignore`.
DEFAULT_IGNORE = [
    "*.tar.gz",
    ".directory",
    ".dropbox",
    ".dropbox.cache",
    ".git",
    ".mypy_cache",
    "_rendered",
    "target",
]


class SyncConfig(BaseModel):
    source_dir: str = "."
    output_dir: str = "_rendered"
    ignore: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE))
    source_extension: str = Field(default="md", min_length=1)
    rendered_extension: str = Field(default="html", min_length=1)
    index_name: str = "index.html"
    incremental: bool = True


class RenderConfig(BaseModel):
    markdown_extensions: list[str] = Field(default_factory=lambda: ["fenced_code", "tables"])
    title_from_heading: bool = True


class WatchConfig(BaseModel):
    debounce_seconds: float = Field(default=1.0, gt=0)


class VersoConfig(BaseModel):
    sync: SyncConfig = Field(default_factory=SyncConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
