"""Data models."""

from epub_gen.models.book import (
    Book,
    Chapter,
    Image,
    ImageOrigin,
)
from epub_gen.models.config import (
    BuildConfig,
    OutputTarget,
    ToMemory,
    ToPath,
)
from epub_gen.models.epub import (
    EpubSummary,
    NavEntry,
    PackageMetadata,
    ResourceEntry,
    SpineDocument,
)
from epub_gen.models.source import (
    BookSource,
    ChapterSource,
    ImageSource,
)

__all__ = [
    # Book models
    "Book",
    "Chapter",
    "Image",
    "ImageOrigin",
    # Build configuration
    "BuildConfig",
    "OutputTarget",
    "ToMemory",
    "ToPath",
    # Read-back models
    "EpubSummary",
    "NavEntry",
    "PackageMetadata",
    "ResourceEntry",
    "SpineDocument",
    # Manifest models
    "BookSource",
    "ChapterSource",
    "ImageSource",
]
