"""Shared fixtures: a small document store on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdtree.index.indexer import Indexer


@pytest.fixture
def docs_repo(tmp_path: Path) -> Path:
    """Document store with nested, empty, hidden and non-Markdown entries."""
    repo = tmp_path / "docs"
    (repo / "guides" / "advanced").mkdir(parents=True)
    (repo / "empty").mkdir()
    (repo / ".git").mkdir()

    (repo / "README.md").write_text("# Welcome\n\nStart here.\n", encoding="utf-8")
    (repo / "notes.txt").write_text("plain text, not a document\n", encoding="utf-8")
    (repo / "guides" / "intro.md").write_text(
        "# Intro\n\nThe quick brown fox\n", encoding="utf-8"
    )
    (repo / "guides" / "logo.png").write_bytes(b"\x89PNG fake image bytes")
    (repo / "guides" / "advanced" / "deep.md").write_text(
        "Deep dive into indexes\n", encoding="utf-8"
    )
    (repo / "empty" / ".draft.md").write_text("hidden draft\n", encoding="utf-8")
    (repo / ".git" / "HEAD.md").write_text("never indexed\n", encoding="utf-8")
    return repo


@pytest.fixture
def loaded_indexer(docs_repo: Path) -> Indexer:
    indexer = Indexer(docs_repo)
    indexer.reload()
    return indexer
