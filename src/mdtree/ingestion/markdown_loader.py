"""Markdown loading and rendering utilities.

Uses markdown-it-py (CommonMark) with linkify and typographic replacements.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Callable

from markdown_it import MarkdownIt

LOGGER = logging.getLogger(__name__)

Renderer = Callable[[str], str]


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"linkify": True, "typographer": True})
    md.enable(["linkify", "replacements", "smartquotes", "table", "strikethrough"])
    return md


def render_markdown(source: str) -> str:
    """Render Markdown source to an HTML fragment."""
    return _parser().render(source)


def read_markdown(path: Path) -> str:
    """Read a Markdown file as text.

    Undecodable bytes are replaced rather than rejected; a broken character
    should not take a whole reload down. ``OSError`` propagates.
    """
    data = path.read_bytes()
    text = data.decode("utf-8", errors="replace")
    if "�" in text and b"\xef\xbf\xbd" not in data:
        LOGGER.warning("Invalid UTF-8 in %s, replaced undecodable bytes", path)
    return text
