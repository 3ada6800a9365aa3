"""Tests for request path resolution."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mdtree.index.tree import build_tree
from mdtree.models import Directory
from mdtree.web.router import MAX_SEGMENTS, Outcome, resolve, split_path


@pytest.fixture
def root(docs_repo: Path) -> Directory:
    tree, _ = build_tree(docs_repo, lambda source: source)
    return tree


class TestSplitPath:
    def test_drops_empty_segments(self) -> None:
        assert split_path("//guides//intro/") == ["guides", "intro"]
        assert split_path("") == []


class TestResolve:
    """Test resolve against the fixture tree."""

    @pytest.mark.parametrize("path", ["", "/", "///"])
    def test_root(self, root: Directory, path: str) -> None:
        resolution = resolve(root, path)

        assert resolution.outcome is Outcome.DIRECTORY
        assert resolution.directory is root

    def test_directory(self, root: Directory) -> None:
        resolution = resolve(root, "/guides/advanced/")

        assert resolution.outcome is Outcome.DIRECTORY
        assert resolution.directory.url == "/guides/advanced"

    def test_document(self, root: Directory) -> None:
        """A trailing document segment yields the document and its directory."""
        resolution = resolve(root, "/guides/intro")

        assert resolution.outcome is Outcome.DOCUMENT
        assert resolution.document.url == "/guides/intro"
        assert resolution.directory.url == "/guides"

    def test_case_insensitive_lookup(self, root: Directory) -> None:
        resolution = resolve(root, "/GUIDES/Intro")

        assert resolution.outcome is Outcome.DOCUMENT
        assert resolution.document.url == "/guides/intro"

    def test_passthrough_file(self, root: Directory, docs_repo: Path) -> None:
        """Non-Markdown files next to documents are served by name."""
        resolution = resolve(root, "/guides/logo.png")

        assert resolution.outcome is Outcome.FILE
        assert resolution.file == docs_repo / "guides" / "logo.png"

    def test_root_passthrough_file(self, root: Directory, docs_repo: Path) -> None:
        resolution = resolve(root, "/notes.txt")

        assert resolution.outcome is Outcome.FILE
        assert resolution.file == docs_repo / "notes.txt"

    @pytest.mark.parametrize(
        "path",
        [
            "/missing",
            "/guides/missing",
            "/guides/intro/extra",
            "/guides/missing/deep",
            "/readme/more",
            "/.git/HEAD.md",
            "/empty/.draft.md",
            "/guides/..",
        ],
    )
    def test_not_found(self, root: Directory, path: str) -> None:
        assert resolve(root, path).outcome is Outcome.NOT_FOUND

    def test_markdown_source_is_served_raw_by_file_name(self, root: Directory) -> None:
        """The file name returns the raw source, the slug the rendered page."""
        assert resolve(root, "/guides/intro.md").outcome is Outcome.FILE
        assert resolve(root, "/guides/intro").outcome is Outcome.DOCUMENT

    def test_sixteen_segments_allowed(self, root: Directory) -> None:
        path = "/" + "/".join(["guides"] * MAX_SEGMENTS)
        assert resolve(root, path).outcome is Outcome.NOT_FOUND

    def test_too_many_segments(self) -> None:
        """Seventeen segments are rejected before any lookup."""
        lookup = MagicMock()
        root = Directory(title="Home", url="/", location=Path("."), lookup=lookup)

        resolution = resolve(root, "/" + "/".join(["a"] * (MAX_SEGMENTS + 1)))

        assert resolution.outcome is Outcome.TOO_LONG
        lookup.get.assert_not_called()
