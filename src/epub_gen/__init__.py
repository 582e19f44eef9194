"""Package book content into EPUB 3 publications."""

from epub_gen.core.builder import (
    EpubBuilder,
    build,
    build_to_folder,
    build_to_memory,
    build_to_path,
)
from epub_gen.core.errors import (
    ArchiveWriteFailure,
    EpubBuildError,
    InvalidBook,
    MalformedChapterMarkup,
    PathCollision,
)
from epub_gen.models import (
    Book,
    BuildConfig,
    Chapter,
    Image,
    ImageOrigin,
    ToMemory,
    ToPath,
)

__version__ = "0.1.0"

__all__ = [
    "EpubBuilder",
    "build",
    "build_to_folder",
    "build_to_memory",
    "build_to_path",
    "Book",
    "BuildConfig",
    "Chapter",
    "Image",
    "ImageOrigin",
    "ToMemory",
    "ToPath",
    "EpubBuildError",
    "InvalidBook",
    "MalformedChapterMarkup",
    "ArchiveWriteFailure",
    "PathCollision",
]
