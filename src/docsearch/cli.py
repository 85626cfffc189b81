"""Command line interface for DocSearch."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from docsearch.config import AppConfig
from docsearch.errors import SearchError
from docsearch.index.indexer import IndexOrchestrator
from docsearch.index.search import search_index
from docsearch.models import DateRange, DirectoryConfig, IndexProgress, SearchFilters

console = Console()
app = typer.Typer(help="DocSearch - local full-text search for documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _parse_day(value: Optional[str]) -> Optional[int]:
    """Parse ``YYYY-MM-DD`` into local-midnight epoch milliseconds."""
    if value is None:
        return None
    try:
        day = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc
    return int(day.timestamp() * 1000)


@app.command()
def index(
    inputs: List[Path] = typer.Argument(
        ..., help="Directories to index.", resolve_path=True
    ),
    index_dir: Path = typer.Option(None, "--index-dir", help="Index directory"),
    recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="Walk subdirectories"),
    pdf: bool = typer.Option(False, "--pdf", help="Extract text from PDF files (slow)"),
    exclude: List[str] = typer.Option([], "--exclude", help="File name glob to skip"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild the index from one or more directories."""
    _setup_logging(verbose)
    config = AppConfig(
        index_dir=index_dir if index_dir is not None else AppConfig().index_dir,
        enable_pdf=pdf,
        exclude_patterns=tuple(exclude),
    )
    directories = [DirectoryConfig(path=str(p), recursive=recursive) for p in inputs]

    console.print(f"Indexing into [bold]{config.resolve_index_dir(Path.cwd())}[/bold]...")
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as bar:
        task = bar.add_task("Indexing", total=100)

        def sink(progress: IndexProgress) -> None:
            # Failed files still advance the percentage, not the indexed count.
            bar.update(task, completed=progress.progress)

        final = IndexOrchestrator.from_config(config, sink=sink).run(directories)

    if final.total_files == 0:
        console.print("[yellow]No files found.[/yellow]")
        return
    console.print(
        f"Indexed: {final.indexed_files}/{final.total_files}, "
        f"index size: {final.index_size_bytes} bytes"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    index_dir: Path = typer.Option(None, "--index-dir", help="Index directory"),
    limit: int = typer.Option(10, help="Number of results to display"),
    offset: int = typer.Option(0, help="Number of results to skip"),
    file_type: List[str] = typer.Option([], "--type", help="File type or tag (text, doc, xls, ppt)"),
    since: Optional[str] = typer.Option(None, help="Modified on or after YYYY-MM-DD"),
    until: Optional[str] = typer.Option(None, help="Modified before YYYY-MM-DD"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Execute a full-text search."""
    _setup_logging(verbose)
    config = AppConfig(index_dir=index_dir if index_dir is not None else AppConfig().index_dir)

    filters = SearchFilters(file_types=list(file_type) or None)
    start, end = _parse_day(since), _parse_day(until)
    if start is not None or end is not None:
        filters.date_range = DateRange(start=start, end=end)

    try:
        response = search_index(query, limit=limit, offset=offset, filters=filters, config=config)
    except SearchError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not response.results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Document")
    table.add_column("Type")
    table.add_column("Snippet")

    for result in response.results:
        snippet = escape(result.highlights[0]) if result.highlights else ""
        snippet = snippet.replace("<mark>", "[bold yellow]").replace("</mark>", "[/bold yellow]")
        table.add_row(
            f"{result.score:.4f}", escape(result.file_path), result.file_type, snippet.replace("\n", " ")
        )

    console.print(table)
    console.print(f"{response.total_count} matches in {response.search_time_ms:.1f} ms")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    index_dir: Path = typer.Option(None, "--index-dir", help="Index directory"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn

        from docsearch.web.app import app as web_app
    except ImportError as exc:  # pragma: no cover - depends on installed extras
        raise typer.BadParameter(
            "The web extras are not installed. Install them with \"python -m pip install '.[web]'\""
        ) from exc

    if index_dir is not None:
        web_app.state.config = AppConfig(index_dir=index_dir)
    console.print(f"Starting DocSearch API on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
