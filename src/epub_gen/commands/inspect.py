"""Inspect command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from epub_gen.core.epub_reader import EpubReader
from epub_gen.models.epub import EpubSummary, NavEntry


def display_navigation(entries: list[NavEntry], console: Console) -> None:
    """Display the table of contents, indented by depth."""
    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("Title", style="white")
    table.add_column("Href", style="dim")

    def add_rows(children: list[NavEntry]) -> None:
        for entry in children:
            indent = "  " * entry.depth
            table.add_row(f"{indent}{escape(entry.title)}", escape(entry.href))
            add_rows(entry.children)

    add_rows(entries)
    console.print(table)


def display_reading_order(summary: EpubSummary, console: Console) -> None:
    """Display spine documents with word and image counts."""
    table = Table(title="Reading Order", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("File", style="dim")
    table.add_column("Words", justify="right", style="green")
    table.add_column("Images", justify="right", style="yellow")

    for document in summary.reading_order:
        title = escape(document.title)
        if not document.linear:
            title += " [dim](aux)[/]"
        table.add_row(
            str(document.position),
            title,
            escape(document.href),
            f"{document.word_count:,}",
            str(document.image_count),
        )

    console.print(table)


def execute_inspect(epub_path: Path, console: Console) -> EpubSummary:
    """Execute the inspect command."""
    summary = EpubReader(epub_path).read()
    metadata = summary.metadata

    info_lines = [
        f"[bold]{escape(metadata.title)}[/]",
        "",
        f"[dim]Author(s):[/] {escape(', '.join(metadata.creators)) or 'Unknown'}",
        f"[dim]Identifier:[/] {escape(metadata.identifier or 'Unknown')}",
        f"[dim]Language:[/] {escape(metadata.language or 'Unknown')}",
    ]
    if metadata.publisher:
        info_lines.append(f"[dim]Publisher:[/] {escape(metadata.publisher)}")
    if metadata.subjects:
        info_lines.append(f"[dim]Subjects:[/] {escape(', '.join(metadata.subjects))}")
    info_lines += [
        f"[dim]Resources:[/] {len(summary.resources)}",
        f"[dim]Images:[/] {len(summary.images)}",
    ]
    console.print(Panel("\n".join(info_lines), title="Book Info", border_style="green"))

    if summary.navigation:
        display_navigation(summary.navigation, console)
    display_reading_order(summary, console)
    return summary
