"""Main CLI application."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from epub_gen.core.errors import EpubBuildError
from epub_gen.core.loader import BookSourceError

app = typer.Typer(
    name="epub-gen",
    help="Package book content into EPUB 3 files.",
    add_completion=False,
)

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Package book content into EPUB 3 files."""
    configure_logging(verbose)


@app.command()
def build(
    manifest_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the book manifest (JSON)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output file (default: {identifier}-{title}.epub next to the manifest)",
            dir_okay=False,
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-d",
            help="Directory for the generated file (ignored with --output)",
            file_okay=False,
        ),
    ] = None,
    embed_images: Annotated[
        bool,
        typer.Option(
            "--embed-images/--no-embed-images",
            help="Package inline images (the cover is always packaged)",
        ),
    ] = True,
    modified: Annotated[
        Optional[datetime],
        typer.Option(
            "--modified",
            help="Fixed modification time (UTC) for reproducible output",
            formats=["%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"],
        ),
    ] = None,
    workers: Annotated[
        int,
        typer.Option(
            "--workers",
            "-w",
            help="Threads used to render chapter documents",
            min=1,
        ),
    ] = 1,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Build an EPUB from a book manifest."""
    from epub_gen.commands.build import execute_build

    try:
        execute_build(
            manifest_path=manifest_path,
            output=output,
            output_dir=output_dir,
            embed_images=embed_images,
            modified=modified,
            workers=workers,
            quiet=quiet,
            console=console,
        )
    except (EpubBuildError, BookSourceError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        raise typer.Exit(1)


@app.command()
def inspect(
    epub_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """Display metadata, table of contents and reading order of an EPUB."""
    from epub_gen.commands.inspect import execute_inspect

    try:
        execute_inspect(epub_path, console)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
