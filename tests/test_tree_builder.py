"""Tests for entry classification and tree building."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from verso_core.errors import InvalidInputError, NotFoundError, UnclassifiableError
from verso_core.sync import (
    STATE_FILE_NAME,
    DirectoryNode,
    DocumentNode,
    GlobIgnoreMatcher,
    LinkNode,
    PlainFileNode,
    build_tree,
    classify,
    compute_hash,
    output_path_for,
)


# ── Output paths ─────────────────────────────────────────────────────


def test_output_path_nested_render_root():
    assert output_path_for(
        Path("/notes/projects/carbon.md"), Path("/notes"), Path("/notes/_rendered")
    ) == Path("/notes/_rendered/projects/carbon.md")


def test_output_path_adjacent_render_root():
    assert output_path_for(
        Path("/notes/projects/carbon"), Path("/notes"), Path("/docs/_rendered")
    ) == Path("/docs/_rendered/projects/carbon")


def test_output_path_of_root_is_output_root():
    assert output_path_for(Path("/notes"), Path("/notes"), Path("/out")) == Path("/out")


def test_output_path_outside_root():
    with pytest.raises(InvalidInputError):
        output_path_for(Path("/elsewhere/a.md"), Path("/notes"), Path("/out"))


# ── classify ─────────────────────────────────────────────────────────


def test_classify_document(tmp_path: Path):
    (tmp_path / "note.md").write_text("hello")
    node = classify(tmp_path / "note.md", tmp_path, Path("/out"))
    assert isinstance(node, DocumentNode)
    assert node.rel_path == "note.md"
    assert node.output_path == Path("/out/note.html")
    assert node.content_hash == compute_hash(b"hello")


def test_classify_plain_file(tmp_path: Path):
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    node = classify(tmp_path / "image.png", tmp_path, Path("/out"))
    assert isinstance(node, PlainFileNode)


def test_classify_custom_extensions(tmp_path: Path):
    (tmp_path / "page.txt").write_text("t")
    node = classify(
        tmp_path / "page.txt", tmp_path, Path("/out"),
        source_extension="txt", rendered_extension="htm",
    )
    assert isinstance(node, DocumentNode)
    assert node.output_path == Path("/out/page.htm")


def test_classify_directory(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    node = classify(tmp_path / "sub", tmp_path, Path("/out"))
    assert isinstance(node, DirectoryNode)
    assert node.output_path == Path("/out/sub")
    assert node.children == []


def test_classify_symlink_is_not_followed(tmp_path: Path):
    (tmp_path / "real.md").write_text("real")
    try:
        os.symlink(tmp_path / "real.md", tmp_path / "alias.md")
    except OSError:
        pytest.skip("symlinks not supported")
    node = classify(tmp_path / "alias.md", tmp_path, Path("/out"))
    assert isinstance(node, LinkNode)


def test_classify_missing(tmp_path: Path):
    with pytest.raises(NotFoundError):
        classify(tmp_path / "nope.md", tmp_path, Path("/out"))


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs mkfifo")
def test_classify_fifo_is_unclassifiable(tmp_path: Path):
    os.mkfifo(tmp_path / "pipe")
    with pytest.raises(UnclassifiableError):
        classify(tmp_path / "pipe", tmp_path, Path("/out"))


# ── build_tree ───────────────────────────────────────────────────────


def _by_rel(root: DirectoryNode) -> dict[str, DirectoryNode]:
    return {d.rel_path: d for d in root.iter_directories()}


def test_build_tree_simple(notes: Path, output_dir: Path):
    root = build_tree(notes, output_dir)
    assert root.rel_path == ""
    assert [c.rel_path for c in root.children] == ["a.md", "sub"]
    sub = _by_rel(root)["sub"]
    assert [c.rel_path for c in sub.children] == ["sub/b.md"]
    assert sub.output_path == output_dir.resolve() / "sub"
    assert root.merkle_hash and sub.merkle_hash


def test_build_tree_children_sorted(tmp_path: Path, output_dir: Path):
    src = tmp_path / "src"
    src.mkdir()
    for name in ["zeta.md", "alpha.md", "mid"]:
        if name == "mid":
            (src / name).mkdir()
        else:
            (src / name).write_text(name)
    root = build_tree(src, output_dir)
    assert [c.name for c in root.children] == ["alpha.md", "mid", "zeta.md"]


def test_build_tree_is_deterministic(deep_notes: Path, output_dir: Path):
    t1 = build_tree(deep_notes, output_dir)
    t2 = build_tree(deep_notes, output_dir)
    assert t1.merkle_hash == t2.merkle_hash
    assert t1.structural_hash == t2.structural_hash


def test_build_tree_nested(deep_notes: Path, output_dir: Path):
    dirs = _by_rel(build_tree(deep_notes, output_dir))
    assert set(dirs) == {"", "a", "a/b", "a/b/c", "a/x", "a/b/z", "other"}
    assert [c.rel_path for c in dirs["a/b/c"].children] == ["a/b/c/deep.md"]


def test_build_tree_ignores_patterns(notes: Path, output_dir: Path):
    (notes / ".git").mkdir()
    (notes / ".git" / "HEAD.md").write_text("ref")
    (notes / "backup.tar.gz").write_bytes(b"gz")
    matcher = GlobIgnoreMatcher([".git", "*.tar.gz"], root=notes)
    root = build_tree(notes, output_dir, matcher=matcher)
    names = [c.name for c in root.children]
    assert ".git" not in names
    assert "backup.tar.gz" not in names


def test_build_tree_skips_state_file(notes: Path, output_dir: Path):
    (notes / STATE_FILE_NAME).write_text("{}")
    root = build_tree(notes, output_dir)
    assert STATE_FILE_NAME not in [c.name for c in root.children]


def test_build_tree_skips_nested_output_root(notes: Path):
    out = notes / "_site"
    out.mkdir()
    (out / "a.html").write_text("<p>X</p>")
    root = build_tree(notes, out)
    assert "_site" not in [c.name for c in root.children]


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs mkfifo")
def test_build_tree_drops_unclassifiable(notes: Path, output_dir: Path):
    os.mkfifo(notes / "pipe")
    root = build_tree(notes, output_dir)
    assert "pipe" not in [c.name for c in root.children]


def test_build_tree_root_is_file(tmp_path: Path, output_dir: Path):
    f = tmp_path / "single.md"
    f.write_text("x")
    with pytest.raises(InvalidInputError):
        build_tree(f, output_dir)


def test_build_tree_missing_root(tmp_path: Path, output_dir: Path):
    with pytest.raises(NotFoundError):
        build_tree(tmp_path / "missing", output_dir)


def test_build_tree_empty_dir(tmp_path: Path, output_dir: Path):
    root = build_tree(tmp_path, output_dir)
    assert root.children == []
    assert root.merkle_hash == root.structural_hash


# ── Names that are not valid UTF-8 ───────────────────────────────────


def _touch_raw_name(directory: Path, raw: bytes, content: str = "x") -> str:
    """Create a file whose name is the raw bytes *raw*; skip where unsupported."""
    name = os.fsdecode(raw)
    try:
        (directory / name).write_text(content)
    except (OSError, UnicodeEncodeError):
        pytest.skip("filesystem rejects names that are not valid UTF-8")
    return name


def test_build_tree_keeps_undecodable_plain_file(notes: Path, output_dir: Path):
    before = build_tree(notes, output_dir)
    name = _touch_raw_name(notes, b"bad\xff.txt")

    root = build_tree(notes, output_dir)

    by_name = {c.name: c for c in root.children}
    assert isinstance(by_name[name], PlainFileNode)
    assert root.structural_hash != before.structural_hash
    # the fold starts from the structural hash
    assert root.merkle_hash != before.merkle_hash


def test_build_tree_hashes_undecodable_document(notes: Path, output_dir: Path):
    name = _touch_raw_name(notes / "sub", b"caf\xe9.md", "old")
    root = build_tree(notes, output_dir)
    sub = root.subdirectories[0]
    doc = {d.name: d for d in sub.documents}[name]
    assert doc.content_hash == compute_hash(b"old")
    assert doc.output_path.name == os.fsdecode(b"caf\xe9.html")
