"""Resolve request paths against the published content tree."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

from mdtree.models import Directory, Document, EntryKind
from mdtree.utils.files import passthrough_file

MAX_SEGMENTS = 16


class Outcome(str, enum.Enum):
    DIRECTORY = "directory"
    DOCUMENT = "document"
    FILE = "file"
    NOT_FOUND = "not_found"
    TOO_LONG = "too_long"


@dataclass(frozen=True, slots=True)
class Resolution:
    outcome: Outcome
    directory: Directory | None = None
    document: Document | None = None
    file: Path | None = None


def split_path(url_path: str) -> list[str]:
    return [segment for segment in url_path.split("/") if segment]


def resolve(root: Directory, url_path: str) -> Resolution:
    """Walk the path's segments down the tree.

    Directories are followed as long as slugs match. What is left decides
    the outcome: nothing is the directory itself, one segment is a document
    of that directory or a raw file next to its documents, more is a miss.
    """
    segments = split_path(url_path)
    if len(segments) > MAX_SEGMENTS:
        return Resolution(Outcome.TOO_LONG)

    directory = root
    rest = segments
    while rest:
        child = directory.lookup.get(rest[0].strip().lower())
        if child is None or child.kind is not EntryKind.DIRECTORY:
            break
        directory = child
        rest = rest[1:]

    if not rest:
        return Resolution(Outcome.DIRECTORY, directory=directory)
    if len(rest) > 1:
        return Resolution(Outcome.NOT_FOUND, directory=directory)

    name = rest[0]
    child = directory.lookup.get(name.strip().lower())
    if child is not None and child.kind is EntryKind.DOCUMENT:
        return Resolution(Outcome.DOCUMENT, directory=directory, document=child)

    file = passthrough_file(directory.location, name)
    if file is None:
        return Resolution(Outcome.NOT_FOUND, directory=directory)
    return Resolution(Outcome.FILE, directory=directory, file=file)
