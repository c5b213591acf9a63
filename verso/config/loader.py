"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from verso_core.config.models import VersoConfig

# Sync paths that, when relative, are anchored at the config file's directory.
_PATH_KEYS = ("source_dir", "output_dir")


def load_config(cli_path: str | None = None) -> VersoConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    path = _find_config_file(cli_path)
    if path is None:
        return VersoConfig()

    raw = _read_yaml(path)
    if raw is None:
        return VersoConfig()
    raw = _anchor_sync_paths(_expand_env_vars(raw), path.parent)
    try:
        return VersoConfig(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def _find_config_file(cli_path: str | None) -> Path | None:
    candidates = [
        Path(cli_path) if cli_path else None,
        Path("./verso.yaml"),
        Path.home() / ".verso" / "config.yaml",
    ]
    for path in candidates:
        if path and path.exists():
            return path
    return None


def _read_yaml(path: Path) -> dict | None:
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}")
    return raw


def _anchor_sync_paths(raw: dict, base: Path) -> dict:
    """Resolve relative sync paths against *base*, leaving absolute and ~ paths alone."""
    sync = raw.get("sync")
    if not isinstance(sync, dict):
        return raw
    sync = dict(sync)
    for key in _PATH_KEYS:
        value = sync.get(key)
        if isinstance(value, str) and value and not value.startswith("~"):
            if not Path(value).is_absolute():
                sync[key] = str(base / value)
    return {**raw, "sync": sync}


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `verso config init`
DEFAULT_CONFIG_TEMPLATE = """\
# verso.yaml

# Sync (relative paths are resolved against this file's directory)
sync:
  source_dir: "."
  output_dir: "_rendered"
  ignore:
    - "*.tar.gz"
    - ".directory"
    - ".dropbox"
    - ".dropbox.cache"
    - ".git"
    - ".mypy_cache"
    - "_rendered"
    - "target"
  source_extension: "md"
  rendered_extension: "html"
  index_name: "index.html"
  incremental: true            # false re-renders everything on every run

# Rendering
render:
  markdown_extensions: [fenced_code, tables]
  title_from_heading: true

# Watch mode
watch:
  debounce_seconds: 1.0

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
