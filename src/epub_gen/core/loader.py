"""Load a Book from a JSON manifest and the files next to it."""

import logging
from pathlib import Path

from pydantic import ValidationError

from epub_gen.core.media import sniff_media_type
from epub_gen.models.book import Book, Chapter, Image, ImageOrigin
from epub_gen.models.source import BookSource

log = logging.getLogger(__name__)


class BookSourceError(Exception):
    """The book manifest or one of its files could not be read."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def _read_bytes(base_dir: Path, relative: str) -> bytes:
    path = base_dir / relative
    try:
        return path.read_bytes()
    except OSError as e:
        raise BookSourceError(path, f"cannot read file ({e.strerror or e})") from e


def _load_image(
    base_dir: Path,
    source: str,
    file: str,
    media_type: str | None,
    origin: ImageOrigin,
) -> Image:
    data = _read_bytes(base_dir, file)
    if media_type is None:
        media_type = sniff_media_type(data)
        if media_type is None:
            raise BookSourceError(base_dir / file, "unknown image format, set media_type")
    return Image(source=source, data=data, media_type=media_type, origin=origin)


def load_book(manifest_path: Path) -> Book:
    """Read a book manifest.

    Relative file paths in the manifest are resolved against its directory.

    Raises:
        BookSourceError: If the manifest is invalid or a file is missing
    """
    manifest_path = Path(manifest_path)
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        raise BookSourceError(manifest_path, f"cannot read manifest ({e.strerror or e})") from e

    try:
        source = BookSource.model_validate_json(text)
    except ValidationError as e:
        raise BookSourceError(manifest_path, f"invalid manifest: {e}") from e

    base_dir = manifest_path.parent
    cover = None
    if source.cover:
        cover = _load_image(base_dir, source.cover, source.cover, None, ImageOrigin.COVER)

    images = [
        _load_image(base_dir, image.source, image.file, image.media_type, ImageOrigin.INLINE)
        for image in source.images
    ]

    chapters = []
    for chapter in source.chapters:
        if chapter.file is not None:
            raw = _read_bytes(base_dir, chapter.file)
            try:
                body = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise BookSourceError(base_dir / chapter.file, "chapter is not UTF-8") from e
        else:
            body = chapter.body
        chapters.append(Chapter(title=chapter.title, body=body, images=chapter.images))

    log.debug(
        "Loaded %s: %d chapters, %d images", manifest_path, len(chapters), len(images)
    )
    return Book(
        identifier=source.identifier,
        title=source.title,
        author=source.author,
        language=source.language,
        description=source.description,
        publisher=source.publisher,
        subjects=source.subjects,
        direction=source.direction,
        cover=cover,
        images=images,
        chapters=chapters,
    )
