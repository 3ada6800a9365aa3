"""In-memory Whoosh full-text index."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from whoosh.analysis import LowercaseFilter, RegexTokenizer
from whoosh.fields import ID, STORED, TEXT, Schema
from whoosh.filedb.filestore import RamStorage
from whoosh.index import Index
from whoosh.searching import Searcher as WhooshSearcher

from mdtree.models import IndexDocument

LOGGER = logging.getLogger(__name__)

# Composite field over name and content. Multi-term queries (fuzzy, prefix,
# wildcard) run against it without analysis, so callers lowercase first.
ALL_FIELD = "all"


def make_analyzer():
    """Word tokenizer plus lowercasing, no stop words and no stemming."""
    return RegexTokenizer() | LowercaseFilter()


def make_schema() -> Schema:
    analyzer = make_analyzer()
    return Schema(
        id=ID(stored=True, unique=True),
        path=STORED(),
        name=TEXT(analyzer=analyzer, phrase=True, stored=True),
        content=TEXT(analyzer=analyzer, phrase=True, stored=True),
        all=TEXT(analyzer=analyzer, phrase=True),
    )


class IndexSnapshot:
    """Read-only index over one batch of documents.

    The index is written exactly once in :func:`build_index`; afterwards only
    searchers are handed out, so a snapshot can be shared between threads.
    """

    def __init__(self, index: Index, doc_count: int) -> None:
        self._index = index
        self.doc_count = doc_count

    @property
    def schema(self) -> Schema:
        return self._index.schema

    @contextmanager
    def searcher(self) -> Iterator[WhooshSearcher]:
        searcher = self._index.searcher()
        try:
            yield searcher
        finally:
            searcher.close()


def build_index(documents: Iterable[IndexDocument]) -> IndexSnapshot:
    """Write all documents in a single commit and return the snapshot."""
    storage = RamStorage()
    index = storage.create_index(make_schema())
    writer = index.writer()
    count = 0
    try:
        for doc in documents:
            fields = {
                "id": doc.id,
                "path": doc.path,
                "name": doc.name,
                "all": doc.name if doc.content is None else f"{doc.name}\n{doc.content}",
            }
            if doc.content is not None:
                fields["content"] = doc.content
            writer.add_document(**fields)
            count += 1
    except Exception:
        writer.cancel()
        raise
    writer.commit()
    LOGGER.debug("Built in-memory index with %d documents", count)
    return IndexSnapshot(index, count)
