"""XML documents of an EPUB 3 publication, built with lxml.

Each builder is a pure function of the book, the allocated Layout and the
embed policy, and returns the serialized document as UTF-8 bytes.
"""

from lxml import etree

from epub_gen.core.allocator import Layout, ManifestItem
from epub_gen.core.markup import EPUB_NS, XHTML_NS, ChapterMarkup
from epub_gen.models.book import Book

OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"
CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

PACKAGE_MEDIA_TYPE = "application/oebps-package+xml"
BOOK_ID = "book-id"

_XHTML_NSMAP = {None: XHTML_NS, "epub": EPUB_NS}


def _opf(tag: str) -> str:
    return f"{{{OPF_NS}}}{tag}"


def _dc(tag: str) -> str:
    return f"{{{DC_NS}}}{tag}"


def _x(tag: str) -> str:
    return f"{{{XHTML_NS}}}{tag}"


def _serialize(root: etree._Element, pretty: bool = True) -> bytes:
    return etree.tostring(
        root, xml_declaration=True, encoding="utf-8", pretty_print=pretty
    )


def _serialize_xhtml(root: etree._Element, pretty: bool = True) -> bytes:
    return etree.tostring(
        etree.ElementTree(root),
        xml_declaration=True,
        encoding="utf-8",
        doctype="<!DOCTYPE html>",
        pretty_print=pretty,
    )


def build_container_document(layout: Layout) -> bytes:
    """META-INF/container.xml pointing at the package document."""
    container = etree.Element(
        f"{{{CONTAINER_NS}}}container", nsmap={None: CONTAINER_NS}, version="1.0"
    )
    rootfiles = etree.SubElement(container, f"{{{CONTAINER_NS}}}rootfiles")
    etree.SubElement(
        rootfiles,
        f"{{{CONTAINER_NS}}}rootfile",
        {"full-path": layout.package_path, "media-type": PACKAGE_MEDIA_TYPE},
    )
    return _serialize(container)


def build_package_document(book: Book, layout: Layout, modified: str) -> bytes:
    """Package (OPF) document: metadata, manifest and spine.

    Args:
        book: Validated book
        layout: Allocated resources; the manifest lists exactly layout.items
        modified: dcterms:modified value (YYYY-MM-DDThh:mm:ssZ)
    """
    package = etree.Element(
        _opf("package"),
        nsmap={None: OPF_NS},
        attrib={"version": "3.0", "unique-identifier": BOOK_ID, XML_LANG: book.language},
    )

    metadata = etree.SubElement(package, _opf("metadata"), nsmap={"dc": DC_NS})
    etree.SubElement(metadata, _dc("identifier"), id=BOOK_ID).text = book.identifier
    etree.SubElement(metadata, _dc("title")).text = book.title
    if book.author.strip():
        etree.SubElement(metadata, _dc("creator"), id="creator").text = book.author
    etree.SubElement(metadata, _dc("language")).text = book.language
    if book.description:
        etree.SubElement(metadata, _dc("description")).text = book.description
    if book.publisher:
        etree.SubElement(metadata, _dc("publisher")).text = book.publisher
    for subject in book.subjects:
        etree.SubElement(metadata, _dc("subject")).text = subject
    etree.SubElement(metadata, _opf("meta"), property="dcterms:modified").text = modified
    if layout.cover_image is not None:
        # EPUB 2 reading systems look for the cover here
        etree.SubElement(metadata, _opf("meta"), name="cover", content=layout.cover_image.id)

    manifest = etree.SubElement(package, _opf("manifest"))
    for item in layout.items:
        attrib = {"id": item.id, "href": item.href, "media-type": item.media_type}
        if item.properties:
            attrib["properties"] = item.properties
        etree.SubElement(manifest, _opf("item"), attrib)

    spine = etree.SubElement(package, _opf("spine"))
    if book.text_direction == "rtl":
        spine.set("page-progression-direction", "rtl")
    for item in layout.spine():
        etree.SubElement(spine, _opf("itemref"), idref=item.id)

    return _serialize(package)


def _xhtml_shell(
    book: Book, layout: Layout, item: ManifestItem, title: str
) -> tuple[etree._Element, etree._Element]:
    """Create <html> with a filled <head>. Returns (html, head)."""
    html = etree.Element(_x("html"), nsmap=_XHTML_NSMAP)
    html.set("lang", book.language)
    html.set(XML_LANG, book.language)
    if book.text_direction == "rtl":
        html.set("dir", "rtl")

    head = etree.SubElement(html, _x("head"))
    etree.SubElement(head, _x("meta"), charset="utf-8")
    etree.SubElement(head, _x("title")).text = title
    if layout.stylesheet is not None:
        etree.SubElement(
            head,
            _x("link"),
            rel="stylesheet",
            type="text/css",
            href=Layout.relative_href(item, layout.stylesheet),
        )
    return html, head


def build_nav_document(book: Book, layout: Layout) -> bytes:
    """Navigation document with the table of contents and landmarks."""
    nav_item = layout.nav
    html, _ = _xhtml_shell(book, layout, nav_item, book.title)
    body = etree.SubElement(html, _x("body"))

    toc = etree.SubElement(body, _x("nav"), {f"{{{EPUB_NS}}}type": "toc", "id": "toc"})
    etree.SubElement(toc, _x("h1")).text = book.title
    ol = etree.SubElement(toc, _x("ol"))
    for position, chapter in enumerate(book.chapters, start=1):
        li = etree.SubElement(ol, _x("li"))
        href = Layout.relative_href(nav_item, layout.chapter(position))
        etree.SubElement(li, _x("a"), href=href).text = chapter.label(position)

    landmarks = etree.SubElement(
        body,
        _x("nav"),
        {f"{{{EPUB_NS}}}type": "landmarks", "id": "landmarks", "hidden": "hidden"},
    )
    etree.SubElement(landmarks, _x("h2")).text = "Landmarks"
    ol = etree.SubElement(landmarks, _x("ol"))
    entries = []
    if layout.cover_page is not None:
        entries.append(("cover", Layout.relative_href(nav_item, layout.cover_page), "Cover"))
    entries.append(("toc", "#toc", "Table of Contents"))
    entries.append(
        ("bodymatter", Layout.relative_href(nav_item, layout.chapter(1)), "Start of Content")
    )
    for epub_type, href, label in entries:
        li = etree.SubElement(ol, _x("li"))
        etree.SubElement(
            li, _x("a"), {f"{{{EPUB_NS}}}type": epub_type, "href": href}
        ).text = label

    return _serialize_xhtml(html)


def build_cover_document(book: Book, layout: Layout) -> bytes:
    """Cover page showing the cover image."""
    page = layout.cover_page
    html, _ = _xhtml_shell(book, layout, page, book.title)
    body = etree.SubElement(html, _x("body"), {"class": "cover"})
    section = etree.SubElement(
        body, _x("section"), {f"{{{EPUB_NS}}}type": "cover", "class": "cover"}
    )
    etree.SubElement(
        section,
        _x("img"),
        src=Layout.relative_href(page, layout.cover_image),
        alt=book.title,
    )
    return _serialize_xhtml(html)


def build_chapter_document(
    book: Book,
    layout: Layout,
    markup: ChapterMarkup,
    embed_images: bool,
) -> bytes:
    """Content document wrapping one chapter body.

    When embedding, <img> sources are rewritten to the allocated image paths;
    otherwise <img> elements are removed since no image bytes are packaged.
    """
    item = layout.chapter(markup.position)
    chapter = book.chapters[markup.position - 1]

    resolve = None
    if embed_images:

        def resolve(source: str) -> str | None:
            image = layout.image_for_source(source)
            if image is None:
                return None
            return Layout.relative_href(item, image)

    rendered = markup.render_body(resolve)

    html, _ = _xhtml_shell(book, layout, item, chapter.label(markup.position))
    body = etree.SubElement(html, _x("body"))
    body.text = rendered.text
    for child in list(rendered):
        body.append(child)

    # Chapter markup is caller-owned; keep its whitespace as supplied
    return _serialize_xhtml(html, pretty=False)
