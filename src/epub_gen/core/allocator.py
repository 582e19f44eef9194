"""Deterministic archive paths and manifest ids for book content.

Every path that ends up in the package document or in the ZIP archive comes
from a Layout produced here. Paths are derived from sequence positions only,
never from titles or image sources.
"""

import logging
import posixpath
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from epub_gen.core.errors import PathCollision
from epub_gen.core.media import extension_for_media_type
from epub_gen.models.book import Book, Image

log = logging.getLogger(__name__)

PACKAGE_DIR = "OEBPS"
PACKAGE_DOCUMENT = "content.opf"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
CSS_MEDIA_TYPE = "text/css"


@dataclass(frozen=True)
class ManifestItem:
    """One publication resource: manifest id, href and media type."""

    id: str
    href: str  # Relative to the package document
    media_type: str
    properties: str | None = None


@dataclass
class Layout:
    """Allocated resources for one build, in manifest order."""

    items: list[ManifestItem] = field(default_factory=list)
    chapters: list[ManifestItem] = field(default_factory=list)
    images: list[tuple[ManifestItem, Image]] = field(default_factory=list)
    nav: ManifestItem | None = None
    stylesheet: ManifestItem | None = None
    cover_image: ManifestItem | None = None
    cover_page: ManifestItem | None = None
    _by_source: dict[str, ManifestItem] = field(default_factory=dict, repr=False)

    @property
    def package_path(self) -> str:
        return f"{PACKAGE_DIR}/{PACKAGE_DOCUMENT}"

    def archive_path(self, item: ManifestItem) -> str:
        """Full path of a resource inside the ZIP archive."""
        return f"{PACKAGE_DIR}/{item.href}"

    def chapter(self, position: int) -> ManifestItem:
        """Manifest item of the chapter at a 1-based position."""
        return self.chapters[position - 1]

    def image_for_source(self, source: str) -> ManifestItem | None:
        return self._by_source.get(source)

    def spine(self) -> list[ManifestItem]:
        """Reading order: cover page (if any), then chapters in book order."""
        spine = [self.cover_page] if self.cover_page is not None else []
        return spine + list(self.chapters)

    @staticmethod
    def relative_href(from_item: ManifestItem, to_item: ManifestItem) -> str:
        """Href of to_item as written inside the document from_item."""
        start = posixpath.dirname(from_item.href) or "."
        return posixpath.relpath(to_item.href, start)


class PathAllocator:
    """Assigns ids and paths to every resource of a book."""

    def __init__(self) -> None:
        self._layout = Layout()
        self._ids: set[str] = set()
        self._hrefs: set[str] = set()

    def _add(self, item: ManifestItem, chapter_index: int | None = None) -> ManifestItem:
        if item.id in self._ids:
            raise PathCollision(f"duplicate manifest id {item.id!r}", chapter_index=chapter_index)
        if item.href in self._hrefs:
            raise PathCollision(f"duplicate path {item.href!r}", chapter_index=chapter_index)
        self._ids.add(item.id)
        self._hrefs.add(item.href)
        self._layout.items.append(item)
        return item

    def allocate(
        self,
        book: Book,
        references: Sequence[Sequence[str]],
        embed_images: bool,
        svg_chapters: Collection[int] = (),
    ) -> Layout:
        """Build the layout for a book.

        Args:
            book: Validated book
            references: Image sources used by each chapter, in chapter order
            embed_images: Whether inline images are packaged
            svg_chapters: Positions of chapters containing inline SVG

        Returns:
            Layout shared by the document builders and the archive assembler
        """
        layout = self._layout
        layout.nav = self._add(
            ManifestItem("nav", "nav.xhtml", XHTML_MEDIA_TYPE, properties="nav")
        )
        layout.stylesheet = self._add(
            ManifestItem("css", "styles/book.css", CSS_MEDIA_TYPE)
        )

        if book.cover is not None:
            ext = extension_for_media_type(book.cover.media_type)
            layout.cover_image = self._add(
                ManifestItem(
                    "cover-image",
                    f"images/cover.{ext}",
                    book.cover.media_type,
                    properties="cover-image",
                )
            )
            layout.cover_page = self._add(
                ManifestItem("cover", "text/cover.xhtml", XHTML_MEDIA_TYPE)
            )

        width = max(3, len(str(len(book.chapters))))
        for position in range(1, len(book.chapters) + 1):
            number = str(position).zfill(width)
            properties = "svg" if position in svg_chapters else None
            layout.chapters.append(
                self._add(
                    ManifestItem(
                        f"chapter{number}",
                        f"text/chapter{number}.xhtml",
                        XHTML_MEDIA_TYPE,
                        properties=properties,
                    ),
                    chapter_index=position,
                )
            )

        if embed_images:
            self._allocate_images(book, references)
        elif book.images:
            log.debug("Skipping %d inline images (embedding disabled)", len(book.images))

        return layout

    def _allocate_images(self, book: Book, references: Sequence[Sequence[str]]) -> None:
        ordered: list[str] = []
        for sources in references:
            for source in sources:
                if source not in ordered:
                    ordered.append(source)

        width = max(3, len(str(len(ordered))))
        for number, source in enumerate(ordered, start=1):
            found = book.find_image(source)
            if found is None:
                # check_invariants rejects dangling references before allocation
                continue
            _, image = found
            ext = extension_for_media_type(image.media_type)
            label = str(number).zfill(width)
            item = self._add(
                ManifestItem(f"img{label}", f"images/img{label}.{ext}", image.media_type)
            )
            self._layout.images.append((item, image))
            self._layout._by_source[source] = item

        unused = len(book.images) - len(self._layout.images)
        if unused:
            log.debug("%d inline images are not referenced by any chapter", unused)
