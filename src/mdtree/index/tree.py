"""Content tree builder.

Walks the document store once, producing the Directory/Document tree the
router serves and, as a side effect, the records the search index is built
from.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from mdtree.ingestion.markdown_loader import Renderer, read_markdown, render_markdown
from mdtree.models import Breadcrumb, Directory, Document, Entry, EntryKind, IndexDocument
from mdtree.utils.files import is_hidden, markup_title
from mdtree.utils.text import join_breadcrumbs, slugify

LOGGER = logging.getLogger(__name__)

ROOT_TITLE = "Home"
ROOT_URL = "/"


class BuildError(Exception):
    """Raised when the document store cannot be read during a build."""


@dataclass(slots=True)
class _Pending:
    """A child waiting for its final slug."""

    slug: str
    name: str
    entry: Entry
    record: IndexDocument
    # slice of the shared record list written by this entry's subtree
    descendants: slice


def build_tree(
    root: Path,
    render: Renderer = render_markdown,
    *,
    title: str = ROOT_TITLE,
) -> tuple[Directory, list[IndexDocument]]:
    """Build the content tree rooted at ``root`` and its index records.

    The root directory is returned even when it holds no documents; it is the
    only directory that is never indexed.
    """
    records: list[IndexDocument] = []
    tree = _load_directory(Path(root), title, ROOT_URL, (), render, records)
    if tree is None:
        tree = Directory(title=title, url=ROOT_URL, location=Path(root))
    return tree, records


def _load_directory(
    location: Path,
    title: str,
    url: str,
    ancestors: tuple[Breadcrumb, ...],
    render: Renderer,
    records: list[IndexDocument],
) -> Directory | None:
    """Load one directory level; None when nothing below it is publishable."""
    try:
        entries = sorted(location.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise BuildError(f"cannot list {location}: {exc}") from exc

    crumbs = ancestors + (Breadcrumb(title, url),)
    # records of this level are appended once slugs are final, after the
    # records of deeper levels
    pending: list[_Pending] = []

    for entry in entries:
        if is_hidden(entry.name):
            continue
        name = entry.name.strip()

        try:
            # symlinked directories are not followed
            is_dir = entry.is_dir() and not entry.is_symlink()
        except OSError as exc:
            raise BuildError(f"cannot stat {entry}: {exc}") from exc

        if is_dir:
            slug = slugify(name)
            if not slug:
                LOGGER.warning("Skipping directory without usable name: %s", entry)
                continue
            start = len(records)
            subdir = _load_directory(
                entry, name, posixpath.join(url, slug), crumbs, render, records
            )
            if subdir is None:
                LOGGER.debug("Skipping empty directory %s", entry)
                continue
            record = IndexDocument(
                id=subdir.url, path=join_breadcrumbs(c.title for c in crumbs), name=entry.name
            )
            pending.append(_Pending(slug, name, subdir, record, slice(start, len(records))))
            continue

        doc_title = markup_title(name)
        if doc_title is None:
            continue
        slug = slugify(doc_title)
        if not slug:
            LOGGER.warning("Skipping document without usable name: %s", entry)
            continue
        try:
            source = read_markdown(entry)
        except OSError as exc:
            raise BuildError(f"cannot read {entry}: {exc}") from exc
        document = Document(
            title=doc_title,
            url=posixpath.join(url, slug),
            html=render(source),
            location=entry,
        )
        record = IndexDocument(
            id=document.url,
            path=join_breadcrumbs(c.title for c in crumbs),
            name=entry.name,
            content=source,
        )
        pending.append(_Pending(slug, name, document, record, slice(0, 0)))

    if not pending:
        return None

    lookup: dict[str, Entry] = {}
    for item in _disambiguate(pending, location, records):
        lookup[item.slug] = item.entry
        records.append(item.record)

    children = tuple(sorted(lookup.values(), key=lambda e: e.url))
    return Directory(
        title=title,
        url=url,
        location=location,
        children=children,
        lookup=MappingProxyType(lookup),
        ancestors=ancestors,
    )


def _disambiguate(
    pending: list[_Pending], location: Path, records: list[IndexDocument]
) -> list[_Pending]:
    """Give siblings that share a slug distinct ones by appending -2, -3, ...

    Entries are visited in name order, so the first name keeps the plain slug.
    URLs of renamed entries are rewritten, including everything below a
    renamed directory and the index records already emitted for it.
    """
    taken = {item.slug for item in pending}
    seen: set[str] = set()
    result: list[_Pending] = []
    for item in pending:
        if item.slug not in seen:
            seen.add(item.slug)
            result.append(item)
            continue
        counter = 2
        while f"{item.slug}-{counter}" in taken:
            counter += 1
        new_slug = f"{item.slug}-{counter}"
        taken.add(new_slug)
        seen.add(new_slug)
        LOGGER.warning(
            "Slug collision in %s: %r renamed from %r to %r",
            location,
            item.name,
            item.slug,
            new_slug,
        )
        result.append(_rename(item, new_slug, records))
    return result


def _rename(item: _Pending, new_slug: str, records: list[IndexDocument]) -> _Pending:
    old_url = item.entry.url
    new_url = posixpath.join(posixpath.dirname(old_url), new_slug)
    for i in range(*item.descendants.indices(len(records))):
        rec = records[i]
        records[i] = IndexDocument(
            id=_move(rec.id, old_url, new_url), path=rec.path, name=rec.name, content=rec.content
        )
    record = IndexDocument(
        id=new_url,
        path=item.record.path,
        name=item.record.name,
        content=item.record.content,
    )
    entry = _rebase(item.entry, old_url, new_url)
    return _Pending(new_slug, item.name, entry, record, item.descendants)


def _move(url: str, old_prefix: str, new_prefix: str) -> str:
    if url == old_prefix or url.startswith(old_prefix + "/"):
        return new_prefix + url[len(old_prefix):]
    return url


def _rebase(entry: Entry, old_prefix: str, new_prefix: str) -> Entry:
    """Copy ``entry`` with its URL prefix moved, recursing into directories."""
    url = _move(entry.url, old_prefix, new_prefix)
    if entry.kind is EntryKind.DOCUMENT:
        return Document(title=entry.title, url=url, html=entry.html, location=entry.location)

    ancestors = tuple(
        Breadcrumb(crumb.title, _move(crumb.url, old_prefix, new_prefix))
        for crumb in entry.ancestors
    )
    lookup = {slug: _rebase(child, old_prefix, new_prefix) for slug, child in entry.lookup.items()}
    return Directory(
        title=entry.title,
        url=url,
        location=entry.location,
        children=tuple(sorted(lookup.values(), key=lambda e: e.url)),
        lookup=MappingProxyType(lookup),
        ancestors=ancestors,
    )
