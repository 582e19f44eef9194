"""Summary of an existing EPUB package, as read back by EpubReader."""

from pydantic import BaseModel, Field


class NavEntry(BaseModel):
    """Table of contents entry from the navigation document."""

    title: str
    href: str
    depth: int = 0
    children: list["NavEntry"] = Field(default_factory=list)


class SpineDocument(BaseModel):
    """Content document referenced by the spine."""

    idref: str
    href: str
    title: str
    position: int  # 1-based, navigation document excluded
    linear: bool = True
    word_count: int = 0
    image_count: int = 0


class ResourceEntry(BaseModel):
    """Manifest item."""

    id: str
    href: str
    media_type: str


class PackageMetadata(BaseModel):
    identifier: str | None = None
    title: str
    creators: list[str] = Field(default_factory=list)
    language: str | None = None
    description: str | None = None
    publisher: str | None = None
    subjects: list[str] = Field(default_factory=list)


class EpubSummary(BaseModel):
    """Metadata, navigation, reading order and manifest of one EPUB."""

    metadata: PackageMetadata
    navigation: list[NavEntry] = Field(default_factory=list)
    reading_order: list[SpineDocument] = Field(default_factory=list)
    resources: list[ResourceEntry] = Field(default_factory=list)

    @property
    def images(self) -> list[str]:
        """Hrefs of image resources, cover included."""
        return [r.href for r in self.resources if r.media_type.startswith("image/")]

    @property
    def spine_ids(self) -> list[str]:
        return [document.idref for document in self.reading_order]
