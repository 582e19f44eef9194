"""
Test configuration and shared fixtures for epub_gen tests
"""
import io
import posixpath
import zipfile
from datetime import datetime, timezone

import pytest
from lxml import etree

from epub_gen.models.book import Book, Chapter, Image, ImageOrigin
from epub_gen.models.config import BuildConfig

# Signature plus padding; enough for media type detection
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 24
GIF_BYTES = b"GIF89a" + b"\x00" * 24

NS = {
    "opf": "http://www.idpf.org/2007/opf",
    "dc": "http://purl.org/dc/elements/1.1/",
    "x": "http://www.w3.org/1999/xhtml",
    "epub": "http://www.idpf.org/2007/ops",
    "c": "urn:oasis:names:tc:opendocument:xmlns:container",
}

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def fixed_config():
    """Build configuration with a fixed modification time"""
    return BuildConfig(modified=FIXED_TIME)


@pytest.fixture
def minimal_book():
    """Single-chapter book without images"""
    return Book(
        identifier="urn:test:1",
        title="T",
        author="A",
        language="en",
        chapters=[Chapter(title="One", body="<p>hi</p>")],
    )


@pytest.fixture
def illustrated_book():
    """Book with a cover, shared and unused inline images"""
    return Book(
        identifier="urn:test:illustrated",
        title="Pictures",
        author="Painter",
        language="en",
        cover=Image(
            source="cover.jpg",
            data=JPEG_BYTES,
            media_type="image/jpeg",
            origin=ImageOrigin.COVER,
        ),
        images=[
            Image(source="https://img.example/b.gif", data=GIF_BYTES, media_type="image/gif"),
            Image(source="https://img.example/a.png", data=PNG_BYTES, media_type="image/png"),
            Image(source="https://img.example/unused.png", data=PNG_BYTES, media_type="image/png"),
        ],
        chapters=[
            Chapter(
                title="First",
                body='<p>Look <img src="https://img.example/a.png"/> here.</p>',
            ),
            Chapter(
                title="",
                body=(
                    '<p><img src="https://img.example/b.gif" alt="b"/></p>'
                    '<p><img src="https://img.example/a.png"/></p>'
                ),
            ),
        ],
    )


def open_epub(data: bytes) -> zipfile.ZipFile:
    """Open archive bytes for reading"""
    return zipfile.ZipFile(io.BytesIO(data))


def read_package(archive: zipfile.ZipFile) -> tuple[str, etree._Element]:
    """Follow container.xml to the package document. Returns (path, root)."""
    container = etree.fromstring(archive.read("META-INF/container.xml"))
    opf_path = container.find(".//c:rootfile", NS).get("full-path")
    return opf_path, etree.fromstring(archive.read(opf_path))


def manifest_paths(archive: zipfile.ZipFile) -> set[str]:
    """Archive paths of every manifest item"""
    opf_path, package = read_package(archive)
    base = posixpath.dirname(opf_path)
    return {
        posixpath.join(base, item.get("href"))
        for item in package.findall("opf:manifest/opf:item", NS)
    }


def spine_ids(archive: zipfile.ZipFile) -> list[str]:
    _, package = read_package(archive)
    return [ref.get("idref") for ref in package.findall("opf:spine/opf:itemref", NS)]
