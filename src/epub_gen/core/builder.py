"""Build pipeline: book -> layout -> documents -> archive."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from epub_gen.core.allocator import Layout, PathAllocator
from epub_gen.core.archive import (
    CONTAINER_PATH,
    ArchiveAssembler,
    FileSink,
    MemorySink,
    OutputSink,
)
from epub_gen.core.documents import (
    build_chapter_document,
    build_container_document,
    build_cover_document,
    build_nav_document,
    build_package_document,
)
from epub_gen.core.markup import ChapterMarkup
from epub_gen.models.book import Book
from epub_gen.models.config import BuildConfig, OutputTarget, ToMemory, ToPath

log = logging.getLogger(__name__)


class EpubBuilder:
    """Packages one book into an EPUB 3 archive.

    A builder holds no state shared with other builders, so separate books
    can be built concurrently with separate instances.
    """

    def __init__(self, book: Book, config: BuildConfig | None = None):
        self.book = book
        self.config = config or BuildConfig()
        self.layout: Layout | None = None  # Resources of the last successful build

    def to_memory(self) -> bytes:
        """Build and return the archive bytes."""
        data = self._assemble(MemorySink())
        log.info("Generated EPUB in memory (%d bytes)", len(data))
        return data

    def to_path(self, path: Path) -> Path:
        """Build and write the archive to path, replacing any existing file."""
        final_path = self._assemble(FileSink(Path(path)))
        log.info("Generated EPUB file %s", final_path)
        return final_path

    def _assemble(self, sink: OutputSink):
        # Everything that can fail on the book itself happens before the
        # sink is opened, so invalid input never creates an output file.
        layout, payloads = self._render()

        with ArchiveAssembler(sink, self.config.compression_level) as assembler:
            assembler.add(CONTAINER_PATH, payloads.pop(CONTAINER_PATH))
            assembler.add(layout.package_path, payloads.pop(layout.package_path))
            for item in layout.items:
                assembler.add(layout.archive_path(item), payloads[item.id])
        self.layout = layout
        return assembler.result

    def _render(self) -> tuple[Layout, dict[str, bytes]]:
        """Validate, allocate paths and render every archive payload.

        Returns:
            The layout and payloads keyed by manifest id, plus the container
            and package documents keyed by their archive paths.
        """
        book = self.book
        embed = self.config.embed_images
        book.check_invariants(embed)

        log.info("Building EPUB %r (%d chapters)", book.title, len(book.chapters))
        markups = [
            ChapterMarkup.parse(position, chapter.body)
            for position, chapter in enumerate(book.chapters, start=1)
        ]
        references = [
            _merge_sources(chapter.images, markup.image_sources())
            for chapter, markup in zip(book.chapters, markups)
        ]
        book.check_invariants(embed, references)

        svg_chapters = {markup.position for markup in markups if markup.uses_svg()}
        layout = PathAllocator().allocate(book, references, embed, svg_chapters)

        payloads: dict[str, bytes] = {
            CONTAINER_PATH: build_container_document(layout),
            layout.package_path: build_package_document(
                book, layout, self.config.modified_timestamp()
            ),
            layout.nav.id: build_nav_document(book, layout),
            layout.stylesheet.id: self.config.stylesheet.encode("utf-8"),
        }
        if layout.cover_image is not None:
            payloads[layout.cover_image.id] = book.cover.data
            payloads[layout.cover_page.id] = build_cover_document(book, layout)
        for position, document in self._render_chapters(layout, markups):
            payloads[layout.chapter(position).id] = document
        for item, image in layout.images:
            payloads[item.id] = image.data

        return layout, payloads

    def _render_chapters(
        self, layout: Layout, markups: list[ChapterMarkup]
    ) -> list[tuple[int, bytes]]:
        """Render chapter documents, optionally in a thread pool.

        Results are returned in chapter order regardless of completion order.
        """
        embed = self.config.embed_images

        def render(markup: ChapterMarkup) -> tuple[int, bytes]:
            return markup.position, build_chapter_document(self.book, layout, markup, embed)

        workers = min(self.config.max_workers, len(markups))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(render, markup) for markup in markups]
                results = [future.result() for future in as_completed(futures)]
        else:
            results = [render(markup) for markup in markups]

        results.sort(key=lambda result: result[0])
        return results


def _merge_sources(declared: list[str], found: list[str]) -> list[str]:
    merged = list(dict.fromkeys(declared))
    merged.extend(source for source in found if source not in merged)
    return merged


def sanitize_file_name(name: str) -> str:
    """Make text safe to use as a file name on common file systems."""
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f\x7f]', "_", name)
    sanitized = re.sub(r"\s+", " ", sanitized).strip(" .")
    return sanitized[:200] or "book"


def default_file_name(book: Book) -> str:
    """File name used when building into a folder: "{identifier}-{title}.epub"."""
    return f"{sanitize_file_name(f'{book.identifier}-{book.title}')}.epub"


def build_to_memory(book: Book, config: BuildConfig | None = None) -> bytes:
    """Build an EPUB and return it as bytes."""
    return EpubBuilder(book, config).to_memory()


def build_to_path(book: Book, path: Path, config: BuildConfig | None = None) -> Path:
    """Build an EPUB and write it to path."""
    return EpubBuilder(book, config).to_path(path)


def build_to_folder(book: Book, directory: Path, config: BuildConfig | None = None) -> Path:
    """Build an EPUB into directory, naming the file after the book."""
    return build_to_path(book, Path(directory) / default_file_name(book), config)


def build(book: Book, target: OutputTarget, config: BuildConfig | None = None) -> bytes | Path:
    """Build an EPUB to the given output target."""
    if isinstance(target, ToPath):
        return build_to_path(book, target.path, config)
    if isinstance(target, ToMemory):
        return build_to_memory(book, config)
    raise TypeError(f"Unsupported output target: {target!r}")
