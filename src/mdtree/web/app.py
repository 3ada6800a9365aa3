"""FastAPI application serving the content tree, search and reloads."""

from __future__ import annotations

import asyncio
import hmac
import logging
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from mdtree.config import AppConfig
from mdtree.index.indexer import Indexer
from mdtree.index.search import Searcher
from mdtree.index.tree import BuildError
from mdtree.models import Library, QueryMatch
from mdtree.web.auth import authenticate, remember_token
from mdtree.web.frontend import STATIC_DIR, render_page
from mdtree.web.router import Outcome, resolve

LOGGER = logging.getLogger(__name__)

# Paths outside the access gate; /reload checks its own secret.
UNGATED_PREFIXES = ("/static/",)
UNGATED_PATHS = ("/reload",)


class ReloadResult(BaseModel):
    status: str
    version: int
    directories: int
    documents: int


def _git_pull(repo_dir: Path) -> None:
    LOGGER.info("Pulling %s", repo_dir)
    result = subprocess.run(
        ["git", "pull", "--ff-only"],
        cwd=repo_dir,
        capture_output=True,
        text=True,
        timeout=300,
    )
    if result.returncode != 0:
        raise BuildError(f"git pull failed: {result.stderr.strip()}")


def _search(library: Library, search: str) -> List[QueryMatch]:
    try:
        return Searcher(library.snapshot).search(search)
    except Exception as exc:
        LOGGER.exception("Search for %r failed: %s", search, exc)
        raise HTTPException(status_code=500, detail="Search failed") from exc


def create_app(config: AppConfig | None = None, indexer: Indexer | None = None) -> FastAPI:
    """Create the web application for one document store.

    The library is loaded at startup unless ``indexer`` already holds one.
    """
    config = config if config is not None else AppConfig.from_env()
    indexer = indexer if indexer is not None else Indexer(config.repo_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not indexer.loaded:
            await asyncio.to_thread(indexer.reload)
        yield
        indexer.close()

    app = FastAPI(title="mdtree", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.indexer = indexer
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    def current_library() -> Library:
        if not indexer.loaded:
            raise HTTPException(status_code=503, detail="Library is loading")
        return indexer.library

    @app.middleware("http")
    async def access_gate(request: Request, call_next):
        path = request.url.path
        if path in UNGATED_PATHS or path.startswith(UNGATED_PREFIXES):
            return await call_next(request)
        credentials = authenticate(config.auth_tokens, request)
        if not credentials.authorized:
            return PlainTextResponse("Unauthorized", status_code=401)
        response = await call_next(request)
        remember_token(response, credentials)
        return response

    @app.get("/reload")
    async def reload_library(secret: str = "") -> ReloadResult:
        if not secret or not hmac.compare_digest(secret.encode(), config.reload_secret.encode()):
            raise HTTPException(status_code=403, detail="Forbidden")
        try:
            if config.git_pull and (config.repo_dir / ".git").exists():
                await asyncio.to_thread(_git_pull, config.repo_dir)
            stats = await asyncio.to_thread(indexer.reload)
        except (BuildError, OSError, subprocess.SubprocessError) as exc:
            LOGGER.exception("Reload failed, keeping the published library: %s", exc)
            raise HTTPException(status_code=500, detail="Reload failed") from exc
        return ReloadResult(
            status="ok",
            version=stats.version,
            directories=stats.directories,
            documents=stats.documents,
        )

    @app.get("/search")
    def search_api(q: str = "") -> List[QueryMatch]:
        return _search(current_library(), q)

    @app.get("/search/{search:path}")
    def search_api_path(search: str) -> List[QueryMatch]:
        return _search(current_library(), search)

    @app.get("/{url_path:path}")
    def page(request: Request, url_path: str = "", s: str = "") -> Response:
        library = current_library()

        search = s.strip()
        if search:
            return render_page(
                request,
                "search.html",
                {"title": f"Search: {search}", "search": search, "matches": _search(library, search)},
            )

        resolution = resolve(library.root, url_path)
        if resolution.outcome is Outcome.TOO_LONG:
            return PlainTextResponse("path too long", status_code=422)
        if resolution.outcome is Outcome.NOT_FOUND:
            return PlainTextResponse("404 page not found", status_code=404)
        if resolution.outcome is Outcome.FILE:
            return FileResponse(resolution.file)

        directory = resolution.directory
        if resolution.outcome is Outcome.DOCUMENT:
            document = resolution.document
            return render_page(
                request,
                "file.html",
                {
                    "title": document.title,
                    "breadcrumbs": directory.breadcrumbs,
                    "document": document,
                },
            )
        return render_page(
            request,
            "dir.html",
            {
                "title": directory.title,
                "breadcrumbs": directory.ancestors,
                "directory": directory,
            },
        )

    return app
