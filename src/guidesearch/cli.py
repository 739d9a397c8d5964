"""Command line interface for guide search."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from guidesearch.config import AppConfig
from guidesearch.content.frontmatter import FrontmatterError
from guidesearch.content.guides import group_by_category, load_categories
from guidesearch.content.loader import list_documents
from guidesearch.index.builder import IndexBuilder, IndexBuildError
from guidesearch.index.search import Searcher
from guidesearch.index.storage import IndexCache, IndexUnavailableError
from guidesearch.utils.dates import format_date
from guidesearch.web.app import app as web_app
from guidesearch.web.app import configure_index

console = Console()
app = typer.Typer(help="Guide search - index and query the studio guide articles")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _config(
    content_dir: Optional[Path] = None,
    index_path: Optional[Path] = None,
    categories_path: Optional[Path] = None,
) -> AppConfig:
    defaults = AppConfig()
    return AppConfig(
        content_dir=content_dir if content_dir is not None else defaults.content_dir,
        index_path=index_path if index_path is not None else defaults.index_path,
        categories_path=categories_path if categories_path is not None else defaults.categories_path,
    )


@app.command()
def build(
    content_dir: Optional[Path] = typer.Argument(None, help="Directory with .mdx guide articles."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Search index output path"),
    word_limit: int = typer.Option(AppConfig().word_limit, help="Words of body text to index per guide"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build the guide search index."""
    _setup_logging(verbose)
    config = _config(content_dir, output)
    source = config.resolve_content_dir(Path.cwd())
    target = config.resolve_index_path(Path.cwd())

    builder = IndexBuilder(word_limit=word_limit, preview_chars=config.preview_chars)
    console.print(f"Indexing [bold]{source}[/bold]...")
    try:
        stats = builder.build(source, target)
    except IndexBuildError as exc:
        console.print(f"[red]Error building search index: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print("[green]Search index built successfully![/green]")
    console.print(f"  - Indexed {stats.documents} guide articles in {len(stats.categories)} categories")
    console.print(f"  - Output: {stats.output}")


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    index: Optional[Path] = typer.Option(None, "--index", help="Search index path"),
    category: Optional[str] = typer.Option(None, help="Only show guides in this category slug"),
    limit: int = typer.Option(AppConfig().default_limit, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search the guide index."""
    _setup_logging(verbose)
    config = _config(index_path=index)
    resolved = config.resolve_index_path(Path.cwd())

    if not resolved.exists():
        raise typer.BadParameter(f"Search index not found: {resolved}")

    searcher = Searcher(IndexCache(resolved), snippet_chars=config.snippet_chars)
    try:
        results = searcher.search(query, category=category, limit=config.clamp_limit(limit))
    except IndexUnavailableError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Guide")
    table.add_column("Category")
    table.add_column("Snippet")
    for result in results:
        table.add_row(
            f"{result.score:.3f}",
            escape(result.title),
            escape(result.category),
            escape(result.snippet.replace("\n", " ")),
        )
    console.print(table)


@app.command()
def guides(
    content_dir: Optional[Path] = typer.Argument(None, help="Directory with .mdx guide articles."),
    categories: Optional[Path] = typer.Option(None, "--categories", help="Category table (JSON)"),
) -> None:
    """List guides grouped by category."""
    config = _config(content_dir, categories_path=categories)
    try:
        documents = list_documents(config.resolve_content_dir(Path.cwd()))
    except (FileNotFoundError, FrontmatterError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    groups = group_by_category(documents, load_categories(config.resolve_categories_path(Path.cwd())))
    if not groups:
        console.print("[yellow]No categorized guides found.[/yellow]")
        return

    for group in groups:
        table = Table(title=group.category.name, show_header=True, header_style="bold magenta")
        table.add_column("Guide")
        table.add_column("Slug")
        table.add_column("Published")
        for guide in group.guides:
            published = format_date(guide.published_at) if guide.published_at else ""
            table.add_row(escape(guide.title), guide.slug, published)
        console.print(table)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    index: Optional[Path] = typer.Option(None, "--index", help="Search index path"),
) -> None:
    """Start the search web interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    cache = configure_index(index)
    if not cache.path.exists():
        console.print("[yellow]Warning: search index not found, searches will fail until it is built.[/yellow]")

    console.print(f"Starting web interface on http://{host}:{port} (index: {cache.path})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
