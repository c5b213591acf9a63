"""Shared test fixtures for Verso."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from verso_core.config.models import SyncConfig, VersoConfig
from verso_core.interfaces import IndexBuilder, Renderer
from verso_core.sync import Synchronizer


@pytest.fixture
def notes(tmp_path: Path) -> Path:
    """The two-note tree from the docs: a.md at the top, sub/b.md below."""
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "a.md").write_text("X")
    (src / "sub" / "b.md").write_text("Y")
    return src


@pytest.fixture
def deep_notes(tmp_path: Path) -> Path:
    """A tree with a three-level chain plus siblings at every level."""
    src = tmp_path / "src"
    (src / "a" / "b" / "c").mkdir(parents=True)
    (src / "a" / "x").mkdir()
    (src / "a" / "b" / "z").mkdir()
    (src / "other").mkdir()
    (src / "top.md").write_text("top")
    (src / "a" / "a.md").write_text("a")
    (src / "a" / "b" / "b.md").write_text("b")
    (src / "a" / "b" / "c" / "deep.md").write_text("deep")
    (src / "a" / "x" / "x.md").write_text("x")
    (src / "a" / "b" / "z" / "z.md").write_text("z")
    (src / "other" / "o.md").write_text("o")
    return src


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def mock_renderer():
    renderer = MagicMock(spec=Renderer)
    renderer.render.side_effect = lambda source: f"<p>{source}</p>"
    return renderer


@pytest.fixture
def mock_index_builder():
    builder = MagicMock(spec=IndexBuilder)
    builder.build.side_effect = lambda directory, entries: (
        "<ul>" + "".join(f"<li>{e.name}</li>" for e in entries) + "</ul>"
    )
    return builder


@pytest.fixture
def make_synchronizer(output_dir, mock_renderer, mock_index_builder):
    """Factory: Synchronizer over *source* writing into the shared output dir."""

    def _make(source: Path, **overrides) -> Synchronizer:
        config = SyncConfig(source_dir=str(source), output_dir=str(output_dir), **overrides)
        return Synchronizer(config, mock_renderer, mock_index_builder)

    return _make


@pytest.fixture
def sample_config():
    return VersoConfig()
