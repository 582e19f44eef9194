"""Data models for the on-disk JSON book manifest."""

from pydantic import BaseModel, Field, model_validator

from epub_gen.core.language import Direction


class ImageSource(BaseModel):
    """Image stored next to the manifest."""

    source: str  # Value used in <img src="..."> by chapter bodies
    file: str
    media_type: str | None = None  # None = detect from file contents


class ChapterSource(BaseModel):
    """Chapter given inline or as a file of XHTML fragment markup."""

    title: str = ""
    body: str | None = None
    file: str | None = None
    images: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _body_or_file(self) -> "ChapterSource":
        if (self.body is None) == (self.file is None):
            raise ValueError("chapter needs exactly one of 'body' or 'file'")
        return self


class BookSource(BaseModel):
    """Book manifest as written by a fetch step."""

    identifier: str
    title: str
    author: str = ""
    language: str = "en"
    description: str | None = None
    publisher: str | None = None
    subjects: list[str] = Field(default_factory=list)
    direction: Direction | None = None  # None = derived from language
    cover: str | None = None  # Path to the cover image file
    images: list[ImageSource] = Field(default_factory=list)
    chapters: list[ChapterSource] = Field(default_factory=list)
