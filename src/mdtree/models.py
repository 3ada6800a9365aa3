"""Core mdtree data models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Union

if TYPE_CHECKING:
    from mdtree.index.storage import IndexSnapshot


class EntryKind(str, enum.Enum):
    DIRECTORY = "directory"
    DOCUMENT = "document"


@dataclass(frozen=True, slots=True)
class Breadcrumb:
    """Title and URL of an ancestor directory."""

    title: str
    url: str


@dataclass(frozen=True, slots=True)
class Document:
    """A rendered Markdown file."""

    title: str
    url: str
    html: str
    location: Path
    kind: EntryKind = field(default=EntryKind.DOCUMENT, init=False)


@dataclass(frozen=True, slots=True)
class Directory:
    """A directory with at least one document somewhere below it.

    ``children`` is ordered by URL, ``lookup`` maps each child's slug to the
    child and ``ancestors`` runs from the root down to the parent.
    """

    title: str
    url: str
    location: Path
    children: tuple[Entry, ...] = ()
    lookup: Mapping[str, Entry] = field(default_factory=dict)
    ancestors: tuple[Breadcrumb, ...] = ()
    kind: EntryKind = field(default=EntryKind.DIRECTORY, init=False)

    @property
    def breadcrumb(self) -> Breadcrumb:
        return Breadcrumb(self.title, self.url)

    @property
    def breadcrumbs(self) -> tuple[Breadcrumb, ...]:
        """Ancestors followed by the directory itself."""
        return self.ancestors + (self.breadcrumb,)


Entry = Union[Directory, Document]


@dataclass(frozen=True, slots=True)
class IndexDocument:
    """One searchable record, emitted per directory and per document."""

    id: str
    path: str
    name: str
    content: str | None = None


@dataclass(slots=True)
class QueryMatch:
    """A search hit ready for display; ``name`` and ``content`` hold HTML."""

    href: str
    path: str
    name: str
    content: str = ""


@dataclass(frozen=True, slots=True)
class Library:
    """A published content tree together with the index built alongside it."""

    root: Directory
    snapshot: IndexSnapshot
    version: int
    built_at: datetime

