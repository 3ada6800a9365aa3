"""Tests for the in-memory index snapshot."""

from __future__ import annotations

from whoosh.query import Every, Term

from mdtree.index.storage import ALL_FIELD, IndexSnapshot, build_index, make_analyzer, make_schema
from mdtree.models import IndexDocument


def _records() -> list[IndexDocument]:
    return [
        IndexDocument(id="/guides", path="Home / ", name="guides"),
        IndexDocument(
            id="/guides/intro",
            path="Home / guides / ",
            name="intro.md",
            content="The quick brown fox",
        ),
    ]


class TestSchema:
    """Test schema and analyzer setup."""

    def test_fields(self) -> None:
        schema = make_schema()
        assert set(schema.names()) == {"id", "path", "name", "content", ALL_FIELD}
        assert set(schema.stored_names()) == {"id", "path", "name", "content"}

    def test_analyzer_keeps_stop_words(self) -> None:
        """Every word is indexed, lowercased."""
        tokens = [token.text for token in make_analyzer()("The Quick a Fox")]
        assert tokens == ["the", "quick", "a", "fox"]


class TestBuildIndex:
    """Test build_index."""

    def test_returns_snapshot(self) -> None:
        snapshot = build_index(_records())

        assert isinstance(snapshot, IndexSnapshot)
        assert snapshot.doc_count == 2

    def test_empty_index(self) -> None:
        snapshot = build_index([])

        assert snapshot.doc_count == 0
        with snapshot.searcher() as searcher:
            assert searcher.doc_count() == 0

    def test_stored_fields(self) -> None:
        """Identifier, path, name and content are stored verbatim."""
        snapshot = build_index(_records())

        with snapshot.searcher() as searcher:
            stored = {fields["id"]: fields for fields in searcher.all_stored_fields()}

        assert stored["/guides"] == {"id": "/guides", "path": "Home / ", "name": "guides"}
        assert stored["/guides/intro"]["content"] == "The quick brown fox"
        assert stored["/guides/intro"]["path"] == "Home / guides / "

    def test_composite_field_covers_name_and_content(self) -> None:
        """The composite field holds terms from both name and body."""
        snapshot = build_index(_records())

        with snapshot.searcher() as searcher:
            assert len(searcher.search(Term(ALL_FIELD, "intro.md"))) == 1
            assert len(searcher.search(Term(ALL_FIELD, "quick"))) == 1
            assert len(searcher.search(Term(ALL_FIELD, "guides"))) == 1
            assert len(searcher.search(Every())) == 2

    def test_searchers_share_one_snapshot(self) -> None:
        """Independent searchers see the same documents."""
        snapshot = build_index(_records())

        with snapshot.searcher() as first, snapshot.searcher() as second:
            assert first.doc_count() == second.doc_count() == 2
