"""Best-fragment extraction with HTML match markup."""

from __future__ import annotations

from typing import Iterable

from whoosh.highlight import ContextFragmenter, HtmlFormatter, highlight

from mdtree.index.storage import make_analyzer


class Highlighter:
    """Marks matched terms inside stored field values.

    Terms are the index terms the whole query expanded to (fuzzy, prefix and
    wildcard), not the positions recorded for one hit. Re-analyzing the
    stored text with the index-time analyzer finds the same words, so a
    hit only shows marks for terms that occur in it.
    """

    def __init__(self, *, maxchars: int = 200, surround: int = 40, top: int = 1) -> None:
        self.analyzer = make_analyzer()
        self.fragmenter = ContextFragmenter(maxchars=maxchars, surround=surround)
        self.formatter = HtmlFormatter(tagname="mark", classname="match", termclass="term")
        self.top = top

    def fragment(self, terms: Iterable[str], text: str | None) -> str:
        """Return the highlighted excerpt, or "" when nothing matched."""
        termset = frozenset(terms)
        if not text or not termset:
            return ""
        return highlight(
            text,
            termset,
            self.analyzer,
            self.fragmenter,
            self.formatter,
            top=self.top,
        )
