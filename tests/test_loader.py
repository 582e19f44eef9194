"""
Tests for loading books from JSON manifests
"""
import json

import pytest

from conftest import GIF_BYTES, JPEG_BYTES, PNG_BYTES
from epub_gen.core.loader import BookSourceError, load_book
from epub_gen.models.book import ImageOrigin


def write_manifest(directory, manifest):
    path = directory / "book.json"
    path.write_text(json.dumps(manifest), encoding="utf-8")
    return path


@pytest.fixture
def book_dir(tmp_path):
    """Directory with chapter and image files referenced by a manifest"""
    (tmp_path / "chapters").mkdir()
    (tmp_path / "chapters" / "one.xhtml").write_text(
        '<p>Café <img src="pics/a.png"/></p>', encoding="utf-8"
    )
    (tmp_path / "pics").mkdir()
    (tmp_path / "pics" / "a.png").write_bytes(PNG_BYTES)
    (tmp_path / "pics" / "b.bin").write_bytes(GIF_BYTES)
    (tmp_path / "cover.jpg").write_bytes(JPEG_BYTES)
    return tmp_path


class TestLoadBook:
    """Test manifest loading"""

    def test_loads_files_relative_to_manifest(self, book_dir):
        path = write_manifest(
            book_dir,
            {
                "identifier": "urn:x",
                "title": "Loaded",
                "author": "Someone",
                "language": "fr",
                "subjects": ["essai"],
                "cover": "cover.jpg",
                "images": [
                    {"source": "pics/a.png", "file": "pics/a.png"},
                    {"source": "b", "file": "pics/b.bin"},
                ],
                "chapters": [
                    {"title": "Un", "file": "chapters/one.xhtml"},
                    {"title": "Deux", "body": "<p>inline</p>", "images": ["b"]},
                ],
            },
        )
        book = load_book(path)

        assert book.identifier == "urn:x"
        assert book.language == "fr"
        assert book.subjects == ["essai"]
        assert book.cover.origin == ImageOrigin.COVER
        assert book.cover.media_type == "image/jpeg"
        assert book.cover.data == JPEG_BYTES
        assert [(i.source, i.media_type) for i in book.images] == [
            ("pics/a.png", "image/png"),
            ("b", "image/gif"),
        ]
        assert book.chapters[0].body.startswith("<p>Café")
        assert book.chapters[1].images == ["b"]

    def test_direction_passed_through(self, book_dir):
        path = write_manifest(
            book_dir,
            {
                "identifier": "x",
                "title": "T",
                "language": "en",
                "direction": "rtl",
                "chapters": [{"body": "<p/>"}],
            },
        )
        book = load_book(path)
        assert book.direction == "rtl"
        assert book.text_direction == "rtl"

    def test_direction_defaults_to_language(self, book_dir):
        path = write_manifest(
            book_dir,
            {"identifier": "x", "title": "T", "language": "he", "chapters": [{"body": "<p/>"}]},
        )
        book = load_book(path)
        assert book.direction is None
        assert book.text_direction == "rtl"

    def test_invalid_direction_rejected(self, book_dir):
        path = write_manifest(
            book_dir,
            {"identifier": "x", "title": "T", "direction": "up", "chapters": [{"body": "<p/>"}]},
        )
        with pytest.raises(BookSourceError, match="invalid manifest"):
            load_book(path)

    def test_explicit_media_type_wins(self, book_dir):
        path = write_manifest(
            book_dir,
            {
                "identifier": "x",
                "title": "T",
                "images": [{"source": "a", "file": "pics/a.png", "media_type": "image/webp"}],
                "chapters": [{"body": "<p/>"}],
            },
        )
        assert load_book(path).images[0].media_type == "image/webp"

    def test_missing_file(self, book_dir):
        path = write_manifest(
            book_dir,
            {"identifier": "x", "title": "T", "chapters": [{"file": "chapters/missing.xhtml"}]},
        )
        with pytest.raises(BookSourceError) as excinfo:
            load_book(path)
        assert excinfo.value.path == book_dir / "chapters" / "missing.xhtml"

    def test_unknown_image_format(self, book_dir):
        (book_dir / "pics" / "mystery").write_bytes(b"not an image")
        path = write_manifest(
            book_dir,
            {
                "identifier": "x",
                "title": "T",
                "images": [{"source": "m", "file": "pics/mystery"}],
                "chapters": [{"body": "<p/>"}],
            },
        )
        with pytest.raises(BookSourceError, match="unknown image format"):
            load_book(path)

    def test_chapter_not_utf8(self, book_dir):
        (book_dir / "chapters" / "latin1.xhtml").write_bytes("<p>café</p>".encode("latin-1"))
        path = write_manifest(
            book_dir,
            {"identifier": "x", "title": "T", "chapters": [{"file": "chapters/latin1.xhtml"}]},
        )
        with pytest.raises(BookSourceError, match="UTF-8"):
            load_book(path)

    @pytest.mark.parametrize(
        "text",
        [
            "{not json",
            json.dumps({"title": "no identifier"}),
            json.dumps({"identifier": "x", "title": "T", "chapters": [{"title": "empty"}]}),
            json.dumps(
                {
                    "identifier": "x",
                    "title": "T",
                    "chapters": [{"body": "<p/>", "file": "one.xhtml"}],
                }
            ),
        ],
    )
    def test_invalid_manifest(self, tmp_path, text):
        path = tmp_path / "book.json"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(BookSourceError, match="invalid manifest"):
            load_book(path)

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(BookSourceError, match="cannot read manifest"):
            load_book(tmp_path / "absent.json")
