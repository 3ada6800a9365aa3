"""Text helpers for building URL keys and breadcrumb strings."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def strip_accents(text: str) -> str:
    """Remove combining marks, keeping the base characters."""
    decomposed = unicodedata.normalize("NFD", text)
    kept = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", kept)


def slugify(name: str) -> str:
    """Return a lowercase key with [a-z0-9] retained and a dash in each gap.

    >>> slugify("Café Déjà-vu")
    'cafe-deja-vu'
    """
    text = strip_accents(name.strip()).lower()
    return "-".join(part for part in _NON_ALNUM.split(text) if part)


def join_breadcrumbs(titles: Iterable[str]) -> str:
    """Collapse titles into the "Home / Guides / " form used in search results."""
    return "".join(f"{title} / " for title in titles)
