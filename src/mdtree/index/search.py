"""Free-text query engine over an index snapshot."""

from __future__ import annotations

import html
import logging
from typing import List

from whoosh import query as wq

from mdtree.index.highlight import Highlighter
from mdtree.index.storage import ALL_FIELD, IndexSnapshot
from mdtree.models import QueryMatch

LOGGER = logging.getLogger(__name__)

MAX_INPUT_CHARS = 128
MAX_WORDS = 4
MAX_WORD_CHARS = 32
DEFAULT_LIMIT = 10


def normalize_query(raw: str) -> list[str]:
    """Crop, lowercase and split the input into at most four distinct words.

    Words longer than 32 characters are dropped after the first four are
    taken, so a long word costs a slot.
    """
    text = raw[:MAX_INPUT_CHARS].lower()
    words = text.split()[:MAX_WORDS]
    return list(dict.fromkeys(word for word in words if len(word) <= MAX_WORD_CHARS))


def build_query(words: list[str]) -> wq.Query | None:
    """AND over words, each matched fuzzily, as a prefix or as a substring.

    The multi-term queries skip the field analyzer, which is why words must
    already be lowercase.
    """
    if not words:
        return None
    clauses = [
        wq.Or(
            [
                wq.FuzzyTerm(ALL_FIELD, word, maxdist=1, prefixlength=0),
                wq.Prefix(ALL_FIELD, word),
                wq.Wildcard(ALL_FIELD, f"*{word}*"),
            ]
        )
        for word in words
    ]
    return wq.And(clauses)


def _term_text(term) -> str:
    text = term[1]
    return text.decode("utf-8") if isinstance(text, bytes) else text


class Searcher:
    """High-level API to query an index snapshot."""

    def __init__(self, snapshot: IndexSnapshot, highlighter: Highlighter | None = None) -> None:
        self.snapshot = snapshot
        self.highlighter = highlighter or Highlighter()

    def search(self, raw_input: str, *, limit: int = DEFAULT_LIMIT) -> List[QueryMatch]:
        words = normalize_query(raw_input)
        query = build_query(words)
        if query is None:
            return []

        matches: List[QueryMatch] = []
        with self.snapshot.searcher() as searcher:
            # index terms the fuzzy, prefix and wildcard clauses expanded to,
            # shared by all hits; each hit's stored text is re-analyzed for them
            terms = {
                _term_text(term)
                for term in query.existing_terms(searcher.reader(), expand=True)
                if term[0] == ALL_FIELD
            }
            for hit in searcher.search(query, limit=limit):
                stored = hit.fields()
                name = stored.get("name", "")
                content = stored.get("content")
                match = QueryMatch(
                    href=stored["id"],
                    path=stored.get("path", ""),
                    name=self.highlighter.fragment(terms, name) or html.escape(name),
                )
                if content:
                    match.content = self.highlighter.fragment(terms, content)
                matches.append(match)
        LOGGER.debug("Query %r (%s) returned %d matches", raw_input, words, len(matches))
        return matches
