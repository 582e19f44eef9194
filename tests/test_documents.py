"""
Tests for package, navigation and content document builders
"""
from lxml import etree

from conftest import NS
from epub_gen.core.allocator import PathAllocator
from epub_gen.core.documents import (
    build_chapter_document,
    build_container_document,
    build_cover_document,
    build_nav_document,
    build_package_document,
)
from epub_gen.core.markup import ChapterMarkup
from epub_gen.models.book import Book, Chapter

MODIFIED = "2024-01-02T03:04:05Z"


def prepare(book, embed_images=True):
    markups = [
        ChapterMarkup.parse(position, chapter.body)
        for position, chapter in enumerate(book.chapters, start=1)
    ]
    references = [markup.image_sources() for markup in markups]
    layout = PathAllocator().allocate(book, references, embed_images)
    return layout, markups


class TestContainerDocument:
    def test_points_at_package_document(self, minimal_book):
        layout, _ = prepare(minimal_book)
        root = etree.fromstring(build_container_document(layout))
        rootfile = root.find(".//c:rootfile", NS)
        assert rootfile.get("full-path") == "OEBPS/content.opf"
        assert rootfile.get("media-type") == "application/oebps-package+xml"


class TestPackageDocument:
    """Test OPF metadata, manifest and spine"""

    def test_metadata(self, minimal_book):
        layout, _ = prepare(minimal_book)
        data = build_package_document(minimal_book, layout, MODIFIED)
        assert data.startswith(b"<?xml")
        root = etree.fromstring(data)
        assert root.get("version") == "3.0"
        assert root.get("unique-identifier") == "book-id"
        identifier = root.find("opf:metadata/dc:identifier", NS)
        assert identifier.text == "urn:test:1"
        assert identifier.get("id") == "book-id"
        assert root.findtext("opf:metadata/dc:title", namespaces=NS) == "T"
        assert root.findtext("opf:metadata/dc:creator", namespaces=NS) == "A"
        assert root.findtext("opf:metadata/dc:language", namespaces=NS) == "en"
        modified = root.find("opf:metadata/opf:meta[@property='dcterms:modified']", NS)
        assert modified.text == MODIFIED

    def test_empty_author_omitted(self):
        book = Book(identifier="x", title="T", chapters=[Chapter(body="<p/>")])
        layout, _ = prepare(book)
        root = etree.fromstring(build_package_document(book, layout, MODIFIED))
        assert root.find("opf:metadata/dc:creator", NS) is None

    def test_optional_metadata(self):
        book = Book(
            identifier="x",
            title="T",
            description="About",
            publisher="Pub",
            subjects=["fantasy", "adventure"],
            chapters=[Chapter(body="<p/>")],
        )
        layout, _ = prepare(book)
        root = etree.fromstring(build_package_document(book, layout, MODIFIED))
        assert root.findtext("opf:metadata/dc:description", namespaces=NS) == "About"
        assert root.findtext("opf:metadata/dc:publisher", namespaces=NS) == "Pub"
        assert [s.text for s in root.findall("opf:metadata/dc:subject", NS)] == [
            "fantasy",
            "adventure",
        ]

    def test_manifest_matches_layout(self, illustrated_book):
        layout, _ = prepare(illustrated_book)
        root = etree.fromstring(build_package_document(illustrated_book, layout, MODIFIED))
        items = root.findall("opf:manifest/opf:item", NS)
        assert [(i.get("id"), i.get("href"), i.get("media-type")) for i in items] == [
            (item.id, item.href, item.media_type) for item in layout.items
        ]
        nav = root.find("opf:manifest/opf:item[@id='nav']", NS)
        assert nav.get("properties") == "nav"
        cover_meta = root.find("opf:metadata/opf:meta[@name='cover']", NS)
        assert cover_meta.get("content") == "cover-image"

    def test_spine_references_manifest_ids(self, illustrated_book):
        layout, _ = prepare(illustrated_book)
        root = etree.fromstring(build_package_document(illustrated_book, layout, MODIFIED))
        manifest_ids = {i.get("id") for i in root.findall("opf:manifest/opf:item", NS)}
        spine = [r.get("idref") for r in root.findall("opf:spine/opf:itemref", NS)]
        assert spine == ["cover", "chapter001", "chapter002"]
        assert set(spine) <= manifest_ids

    def test_rtl_page_progression(self):
        book = Book(identifier="x", title="T", language="ar", chapters=[Chapter(body="<p/>")])
        layout, _ = prepare(book)
        root = etree.fromstring(build_package_document(book, layout, MODIFIED))
        assert root.find("opf:spine", NS).get("page-progression-direction") == "rtl"


class TestNavDocument:
    """Test table of contents and landmarks"""

    def test_toc_lists_chapters_in_order(self, illustrated_book):
        layout, _ = prepare(illustrated_book)
        root = etree.fromstring(build_nav_document(illustrated_book, layout))
        toc = root.xpath(".//x:nav[@epub:type='toc']", namespaces=NS)[0]
        links = toc.findall("x:ol/x:li/x:a", NS)
        assert [(a.get("href"), a.text) for a in links] == [
            ("text/chapter001.xhtml", "First"),
            ("text/chapter002.xhtml", "Chapter 2"),
        ]

    def test_landmarks(self, illustrated_book):
        layout, _ = prepare(illustrated_book)
        root = etree.fromstring(build_nav_document(illustrated_book, layout))
        landmarks = root.xpath(".//x:nav[@epub:type='landmarks']", namespaces=NS)[0]
        links = landmarks.findall("x:ol/x:li/x:a", NS)
        assert [a.get("{http://www.idpf.org/2007/ops}type") for a in links] == [
            "cover",
            "toc",
            "bodymatter",
        ]
        assert links[0].get("href") == "text/cover.xhtml"

    def test_has_html5_doctype(self, minimal_book):
        layout, _ = prepare(minimal_book)
        data = build_nav_document(minimal_book, layout)
        assert b"<!DOCTYPE html>" in data


class TestChapterDocument:
    """Test chapter content documents"""

    def test_wraps_body_in_shell(self, minimal_book):
        layout, markups = prepare(minimal_book)
        data = build_chapter_document(minimal_book, layout, markups[0], embed_images=False)
        root = etree.fromstring(data)
        assert root.get("lang") == "en"
        assert root.get("{http://www.w3.org/XML/1998/namespace}lang") == "en"
        assert root.findtext("x:head/x:title", namespaces=NS) == "One"
        link = root.find("x:head/x:link", NS)
        assert link.get("href") == "../styles/book.css"
        assert root.findtext("x:body/x:p", namespaces=NS) == "hi"

    def test_images_rewritten_when_embedding(self, illustrated_book):
        layout, markups = prepare(illustrated_book)
        root = etree.fromstring(
            build_chapter_document(illustrated_book, layout, markups[1], embed_images=True)
        )
        sources = [img.get("src") for img in root.iter("{http://www.w3.org/1999/xhtml}img")]
        assert sources == ["../images/img002.gif", "../images/img001.png"]

    def test_images_removed_when_not_embedding(self, illustrated_book):
        layout, markups = prepare(illustrated_book, embed_images=False)
        data = build_chapter_document(illustrated_book, layout, markups[0], embed_images=False)
        root = etree.fromstring(data)
        assert list(root.iter("{http://www.w3.org/1999/xhtml}img")) == []
        assert "".join(root.find("x:body/x:p", NS).itertext()) == "Look  here."

    def test_untitled_chapter_uses_ordinal(self, illustrated_book):
        layout, markups = prepare(illustrated_book)
        root = etree.fromstring(
            build_chapter_document(illustrated_book, layout, markups[1], embed_images=True)
        )
        assert root.findtext("x:head/x:title", namespaces=NS) == "Chapter 2"

    def test_body_markup_preserved(self):
        body = '<h2 class="c">Title</h2>\n<p>One <em>two</em></p>'
        book = Book(identifier="x", title="T", chapters=[Chapter(body=body)])
        layout, markups = prepare(book)
        data = build_chapter_document(book, layout, markups[0], embed_images=True)
        assert b'<h2 class="c">Title</h2>\n<p>One <em>two</em></p>' in data


class TestCoverDocument:
    def test_shows_cover_image(self, illustrated_book):
        layout, _ = prepare(illustrated_book)
        root = etree.fromstring(build_cover_document(illustrated_book, layout))
        img = root.find(".//x:img", NS)
        assert img.get("src") == "../images/cover.jpg"
