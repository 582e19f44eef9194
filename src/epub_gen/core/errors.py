"""Errors raised while building an EPUB."""


class EpubBuildError(Exception):
    """Base class for every failure that aborts a build."""

    kind = "EpubBuildError"

    def __init__(
        self,
        message: str,
        chapter_index: int | None = None,
        image_index: int | None = None,
    ):
        self.message = message
        self.chapter_index = chapter_index
        self.image_index = image_index
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.chapter_index is not None:
            where.append(f"chapter {self.chapter_index}")
        if self.image_index is not None:
            where.append(f"image {self.image_index}")
        if where:
            return f"{self.kind}: {self.message} ({', '.join(where)})"
        return f"{self.kind}: {self.message}"


class InvalidBook(EpubBuildError):
    """The book violates a content model invariant."""

    kind = "InvalidBook"


class MalformedChapterMarkup(EpubBuildError):
    """A chapter body is not well-formed enough to embed as XHTML."""

    kind = "MalformedChapterMarkup"


class ArchiveWriteFailure(EpubBuildError):
    """The archive stream or destination file could not be written."""

    kind = "ArchiveWriteFailure"


class PathCollision(EpubBuildError):
    """Two archive entries were assigned the same path.

    Paths are keyed by position, so this always indicates a bug.
    """

    kind = "PathCollision"
