"""Utility helpers for working with the document store."""

from __future__ import annotations

from pathlib import Path

MARKUP_SUFFIXES = (".md", ".markdown")


def is_hidden(name: str) -> bool:
    """Dotfiles and dot-directories are never part of the published tree."""
    return name.startswith(".")


def markup_title(name: str) -> str | None:
    """Return the document title for a Markdown filename, None for other files."""
    lowered = name.lower()
    for suffix in MARKUP_SUFFIXES:
        if lowered.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return None


def passthrough_file(location: Path, name: str) -> Path | None:
    """Resolve a raw file living directly inside location, or None.

    Hidden names (which include "." and "..") and names with separators are
    refused, so the lookup never leaves the directory it was asked about.
    """
    if not name or is_hidden(name) or "/" in name or "\\" in name or "\0" in name:
        return None
    candidate = location / name
    try:
        if not candidate.is_file():
            return None
    except OSError:
        return None
    return candidate
