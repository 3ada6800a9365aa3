"""Reload coordination: build a new tree and index, then publish both at once."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from mdtree.index.storage import build_index
from mdtree.index.tree import build_tree
from mdtree.ingestion.markdown_loader import Renderer, render_markdown
from mdtree.models import Library

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    version: int = 0
    directories: int = 0
    documents: int = 0
    seconds: float = 0.0


class Indexer:
    """Owns the published :class:`Library` of one document store.

    Readers grab ``indexer.library`` once per request and keep using that
    object; a reload builds a complete replacement off to the side and swaps
    the attribute in one assignment, so nobody ever sees half a build.
    Reloads are serialized by a lock. A failed reload raises and leaves the
    previous library in place.
    """

    def __init__(self, repo_dir: Path, *, render: Renderer = render_markdown) -> None:
        self.repo_dir = Path(repo_dir)
        self.render = render
        self._library: Library | None = None
        self._reload_lock = threading.Lock()

    @property
    def library(self) -> Library:
        library = self._library
        if library is None:
            raise RuntimeError("Indexer has not been loaded yet; call reload() first")
        return library

    @property
    def loaded(self) -> bool:
        return self._library is not None

    def reload(self) -> IndexStats:
        """Rebuild tree and index from disk and publish them."""
        with self._reload_lock:
            started = time.perf_counter()
            LOGGER.info("Loading %s", self.repo_dir)
            root, records = build_tree(self.repo_dir, self.render)
            snapshot = build_index(records)

            previous = self._library
            version = previous.version + 1 if previous is not None else 1
            self._library = Library(
                root=root,
                snapshot=snapshot,
                version=version,
                built_at=datetime.now(timezone.utc),
            )

            documents = sum(1 for record in records if record.content is not None)
            stats = IndexStats(
                version=version,
                directories=len(records) - documents,
                documents=documents,
                seconds=time.perf_counter() - started,
            )
            LOGGER.info(
                "Published version %d: %d directories, %d documents in %.2fs",
                stats.version,
                stats.directories,
                stats.documents,
                stats.seconds,
            )
            return stats

    def close(self) -> None:
        """Drop the published library; in-flight readers keep their reference."""
        self._library = None
