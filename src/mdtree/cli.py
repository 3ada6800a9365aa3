"""Command line interface for mdtree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from mdtree.config import AppConfig
from mdtree.index.indexer import Indexer, IndexStats
from mdtree.index.search import Searcher
from mdtree.index.tree import BuildError
from mdtree.models import Directory, EntryKind

console = Console()
app = typer.Typer(help="mdtree - browse and search a directory of Markdown documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load(repo: Path) -> tuple[Indexer, IndexStats]:
    indexer = Indexer(repo)
    try:
        stats = indexer.reload()
    except BuildError as exc:
        raise typer.BadParameter(f"Cannot load {repo}: {exc}") from exc
    return indexer, stats


@app.command()
def serve(
    repo: Optional[Path] = typer.Option(None, "--repo", help="Document directory (default: MDTREE_REPO)"),
    host: Optional[str] = typer.Option(None, help="Host interface (default: from MDTREE_LISTEN)"),
    port: Optional[int] = typer.Option(None, help="Server port (default: from MDTREE_LISTEN)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the web server."""
    _setup_logging(verbose)
    import uvicorn

    try:
        config = AppConfig.from_env()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if repo is not None:
        config.repo_dir = repo
    if host is not None:
        config.host = host
    if port is not None:
        config.port = port

    from mdtree.web.app import create_app

    indexer, _ = _load(config.repo_dir)
    console.print(
        f"Serving [bold]{config.repo_dir}[/bold] on http://{config.host}:{config.port} "
        f"(auth: {'public' if config.is_public else 'token'})"
    )
    uvicorn.run(
        create_app(config, indexer),
        host=config.host,
        port=config.port,
        reload=False,
        log_level="debug" if verbose else "info",
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    repo: Path = typer.Option(Path("."), "--repo", help="Document directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search the documents and print the best matches."""
    _setup_logging(verbose)
    indexer, _ = _load(repo)
    results = Searcher(indexer.library.snapshot).search(query)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("URL")
    table.add_column("Path")
    table.add_column("Name")
    table.add_column("Snippet")

    for result in results:
        snippet = result.content.replace("\n", " ")
        table.add_row(Text(result.href), Text(result.path), Text(result.name), Text(snippet[:180]))

    console.print(table)


def _add_children(branch: Tree, directory: Directory) -> None:
    for entry in directory.children:
        if entry.kind is EntryKind.DIRECTORY:
            _add_children(branch.add(f"[bold]{escape(entry.title)}/[/bold]  [dim]{entry.url}[/dim]"), entry)
        else:
            branch.add(f"{escape(entry.title)}  [dim]{entry.url}[/dim]")


@app.command()
def tree(
    repo: Path = typer.Option(Path("."), "--repo", help="Document directory"),
) -> None:
    """Print the published content tree."""
    indexer, stats = _load(repo)
    root = indexer.library.root
    view = Tree(f"[bold]{escape(root.title)}[/bold]  [dim]{root.url}[/dim]")
    _add_children(view, root)
    console.print(view)
    console.print(f"{stats.directories} directories, {stats.documents} documents")
