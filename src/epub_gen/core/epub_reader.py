"""Read an existing EPUB with ebooklib and summarize its package."""

import logging
import warnings
from pathlib import Path

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from epub_gen.models.epub import (
    EpubSummary,
    NavEntry,
    PackageMetadata,
    ResourceEntry,
    SpineDocument,
)

log = logging.getLogger(__name__)

# Content documents are XHTML; the lxml HTML parser reads them fine
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


class EpubReader:
    """Summarize the metadata, navigation and spine of an EPUB file."""

    def __init__(self, epub_path: Path):
        self.path = Path(epub_path)
        # Navigation comes from the EPUB 3 nav document, not an NCX
        self.book = epub.read_epub(str(self.path), {"ignore_ncx": True})

    def read(self) -> EpubSummary:
        navigation = self._navigation(self.book.toc)
        summary = EpubSummary(
            metadata=self._metadata(),
            navigation=navigation,
            reading_order=self._reading_order(navigation),
            resources=self._resources(),
        )
        log.debug(
            "Read %s: %d spine documents, %d resources",
            self.path,
            len(summary.reading_order),
            len(summary.resources),
        )
        return summary

    def _values(self, name: str) -> list[str]:
        return [value for value, _ in self.book.get_metadata("DC", name)]

    def _metadata(self) -> PackageMetadata:
        def first(name: str) -> str | None:
            values = self._values(name)
            return values[0] if values else None

        return PackageMetadata(
            identifier=first("identifier"),
            title=first("title") or "Unknown Title",
            creators=self._values("creator"),
            language=first("language"),
            description=first("description"),
            publisher=first("publisher"),
            subjects=self._values("subject"),
        )

    def _navigation(self, entries: list, depth: int = 0) -> list[NavEntry]:
        """Convert ebooklib's toc (Links, or (Section, children) tuples)."""
        result = []
        for entry in entries:
            children: list[NavEntry] = []
            if isinstance(entry, tuple):
                entry, nested = entry
                children = self._navigation(nested, depth + 1)
            result.append(
                NavEntry(
                    title=entry.title or "Untitled",
                    href=entry.href or "",
                    depth=depth,
                    children=children,
                )
            )
        return result

    def _reading_order(self, navigation: list[NavEntry]) -> list[SpineDocument]:
        titles: dict[str, str] = {}
        _collect_titles(navigation, titles)

        documents = []
        for idref, linear in self.book.spine:
            item = self.book.get_item_with_id(idref)
            if item is None:
                log.warning("Spine references unknown manifest id %r", idref)
                continue
            if item.get_type() == ebooklib.ITEM_NAVIGATION:
                continue

            soup = BeautifulSoup(item.get_content(), "lxml")
            href = item.get_name()
            documents.append(
                SpineDocument(
                    idref=idref,
                    href=href,
                    title=titles.get(href) or _heading_text(soup) or href,
                    position=len(documents) + 1,
                    linear=linear != "no",
                    word_count=len((soup.body or soup).get_text(" ", strip=True).split()),
                    image_count=len(soup.find_all("img")),
                )
            )
        return documents

    def _resources(self) -> list[ResourceEntry]:
        return [
            ResourceEntry(id=item.get_id(), href=item.get_name(), media_type=item.media_type)
            for item in self.book.get_items()
        ]


def _collect_titles(entries: list[NavEntry], titles: dict[str, str]) -> None:
    for entry in entries:
        if entry.href:
            titles.setdefault(entry.href.split("#", 1)[0], entry.title)
        _collect_titles(entry.children, titles)


def _heading_text(soup: BeautifulSoup) -> str | None:
    for tag in ("h1", "h2", "title"):
        element = soup.find(tag)
        if element:
            text = element.get_text(strip=True)
            if text:
                return text
    return None
