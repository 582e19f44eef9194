"""Build command implementation."""

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from epub_gen.core.builder import EpubBuilder, default_file_name
from epub_gen.core.loader import load_book
from epub_gen.models.config import BuildConfig


def resolve_output_path(
    manifest_path: Path,
    output: Path | None,
    output_dir: Path | None,
    file_name: str,
) -> Path:
    """Pick the destination file.

    An explicit --output wins; otherwise the file is named after the book and
    placed in --output-dir, or next to the manifest.
    """
    if output is not None:
        return output
    directory = output_dir if output_dir is not None else manifest_path.parent
    return directory / file_name


def execute_build(
    manifest_path: Path,
    output: Path | None,
    output_dir: Path | None,
    embed_images: bool,
    modified: datetime | None,
    workers: int,
    quiet: bool,
    console: Console,
) -> Path:
    """Execute the build command."""
    book = load_book(manifest_path)
    config = BuildConfig(embed_images=embed_images, modified=modified, max_workers=workers)
    destination = resolve_output_path(
        manifest_path, output, output_dir, default_file_name(book)
    )

    builder = EpubBuilder(book, config)
    if quiet:
        final_path = builder.to_path(destination)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task(f"Building {escape(book.title)}...", total=None)
            final_path = builder.to_path(destination)

    if not quiet:
        inline = len(builder.layout.images)
        summary_lines = [
            f"[bold]{escape(book.title)}[/]",
            f"[dim]Author:[/] {escape(book.author) or 'Unknown'}",
            f"[dim]Chapters:[/] {len(book.chapters)}",
            f"[dim]Images:[/] {inline}{' + cover' if book.cover else ''}",
            "",
            f"[dim]Output:[/] {escape(str(final_path))}",
            f"[dim]Size:[/] {final_path.stat().st_size:,} bytes",
        ]
        console.print(
            Panel(
                "\n".join(summary_lines),
                title="EPUB Generated",
                border_style="green",
            )
        )

    return final_path
