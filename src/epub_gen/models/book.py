"""Data models for book content handed to the EPUB builder."""

import re
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from epub_gen.core.errors import InvalidBook
from epub_gen.core.language import Direction, direction_for_language
from epub_gen.core.media import DEFAULT_IMAGE_MEDIA_TYPE, sniff_media_type


# Characters XML 1.0 cannot represent
_XML_ILLEGAL = re.compile(
    "[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


class ImageOrigin(str, Enum):
    """Where an image is used in the publication."""

    COVER = "cover"
    INLINE = "inline"


class Image(BaseModel):
    """Binary image asset."""

    model_config = ConfigDict(frozen=True)

    source: str  # Key used by chapter markup (<img src="...">)
    data: bytes
    media_type: str = DEFAULT_IMAGE_MEDIA_TYPE
    origin: ImageOrigin = ImageOrigin.INLINE

    @classmethod
    def from_bytes(
        cls,
        source: str,
        data: bytes,
        origin: ImageOrigin = ImageOrigin.INLINE,
    ) -> "Image":
        """Create an image, detecting the media type from its signature."""
        media_type = sniff_media_type(data) or DEFAULT_IMAGE_MEDIA_TYPE
        return cls(source=source, data=data, media_type=media_type, origin=origin)


class Chapter(BaseModel):
    """Chapter content. Position in Book.chapters is its identity."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    body: str
    images: list[str] = Field(default_factory=list)

    def label(self, position: int) -> str:
        """Title for navigation, falling back to an ordinal label."""
        return self.title.strip() or f"Chapter {position}"


class Book(BaseModel):
    """Complete book content and metadata."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    title: str
    author: str = ""
    language: str = "en"
    cover: Image | None = None
    images: list[Image] = Field(default_factory=list)
    chapters: list[Chapter] = Field(default_factory=list)
    description: str | None = None
    publisher: str | None = None
    subjects: list[str] = Field(default_factory=list)
    direction: Direction | None = None

    @property
    def text_direction(self) -> Direction:
        return self.direction or direction_for_language(self.language)

    def find_image(self, source: str) -> tuple[int, Image] | None:
        """Look up an inline image by source. Returns (1-based index, image)."""
        for index, image in enumerate(self.images, start=1):
            if image.source == source:
                return index, image
        return None

    def check_invariants(
        self,
        embed_images: bool,
        references: Sequence[Sequence[str]] | None = None,
    ) -> None:
        """Raise InvalidBook if the book cannot be packaged.

        Args:
            embed_images: Whether inline images will be packaged
            references: Image sources referenced by each chapter, in chapter
                order. Defaults to the sources declared on each chapter.
        """
        if not self.identifier.strip():
            raise InvalidBook("book identifier is empty")
        if not self.title.strip():
            raise InvalidBook("book title is empty")
        if not self.language.strip():
            raise InvalidBook("book language is empty")
        if not self.chapters:
            raise InvalidBook("book has no chapters")

        metadata = {
            "identifier": self.identifier,
            "title": self.title,
            "author": self.author,
            "language": self.language,
            "description": self.description or "",
            "publisher": self.publisher or "",
            **{f"subject {i}": s for i, s in enumerate(self.subjects, start=1)},
        }
        for name, value in metadata.items():
            if _XML_ILLEGAL.search(value):
                raise InvalidBook(f"book {name} contains characters not allowed in XML")
        for position, chapter in enumerate(self.chapters, start=1):
            if _XML_ILLEGAL.search(chapter.title):
                raise InvalidBook(
                    "chapter title contains characters not allowed in XML",
                    chapter_index=position,
                )

        if self.cover is not None and self.cover.origin != ImageOrigin.COVER:
            raise InvalidBook("cover image must have origin 'cover'")

        seen: set[str] = set()
        for index, image in enumerate(self.images, start=1):
            if image.origin != ImageOrigin.INLINE:
                raise InvalidBook(
                    "inline image must have origin 'inline'", image_index=index
                )
            if image.source in seen:
                raise InvalidBook(
                    f"duplicate image source {image.source!r}", image_index=index
                )
            seen.add(image.source)

        if not embed_images:
            return

        if references is None:
            references = [chapter.images for chapter in self.chapters]
        for position, sources in enumerate(references, start=1):
            for source in sources:
                if source not in seen:
                    raise InvalidBook(
                        f"image {source!r} is not in the book's image collection",
                        chapter_index=position,
                    )
