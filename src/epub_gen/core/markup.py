"""Parsing and image-reference handling for chapter body markup."""

import copy
import re
from collections.abc import Callable
from html.entities import html5

from lxml import etree

from epub_gen.core.errors import MalformedChapterMarkup

XHTML_NS = "http://www.w3.org/1999/xhtml"
EPUB_NS = "http://www.idpf.org/2007/ops"
SVG_NS = "http://www.w3.org/2000/svg"

_ENTITY_RE = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")
_XML_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})
_IMG_TAG = f"{{{XHTML_NS}}}img"
_SVG_TAG = f"{{{SVG_NS}}}svg"


def _numeric_entities(markup: str) -> str:
    """Replace HTML named entities with numeric character references.

    XML only predefines five entities; "&nbsp;" and friends would otherwise
    make common fragment markup fail to parse. Unknown names are left alone
    and rejected by the parser.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in _XML_ENTITIES:
            return match.group(0)
        text = html5.get(f"{name};")
        if text is None:
            return match.group(0)
        return "".join(f"&#{ord(ch)};" for ch in text)

    return _ENTITY_RE.sub(replace, markup)


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=False,
        strip_cdata=False,
    )


class ChapterMarkup:
    """Well-formed body of one chapter, parsed into an XHTML <body> element."""

    def __init__(self, position: int, body: etree._Element):
        self.position = position
        self.body = body

    @classmethod
    def parse(cls, position: int, markup: str) -> "ChapterMarkup":
        """Parse a chapter fragment.

        Raises:
            MalformedChapterMarkup: If the fragment is not well-formed XML
        """
        wrapped = (
            f'<body xmlns="{XHTML_NS}" xmlns:epub="{EPUB_NS}">'
            f"{_numeric_entities(markup)}</body>"
        )
        try:
            body = etree.fromstring(wrapped.encode("utf-8"), _parser())
        except etree.XMLSyntaxError as e:
            raise MalformedChapterMarkup(
                f"body is not well-formed: {e.msg}", chapter_index=position
            ) from e
        return cls(position, body)

    def uses_svg(self) -> bool:
        """True if the body contains an inline <svg> element."""
        return next(self.body.iter(_SVG_TAG), None) is not None

    def image_sources(self) -> list[str]:
        """Return <img src> values in document order, without duplicates."""
        sources: list[str] = []
        for img in self.body.iter(_IMG_TAG):
            src = img.get("src")
            if src and src not in sources:
                sources.append(src)
        return sources

    def render_body(self, resolve: Callable[[str], str | None] | None) -> etree._Element:
        """Return a copy of the body with image references rewritten.

        Args:
            resolve: Maps an image source to its new href. With None, every
                <img> element is removed (images are not being packaged).
        """
        body = copy.deepcopy(self.body)
        for img in list(body.iter(_IMG_TAG)):
            src = img.get("src")
            href = resolve(src) if (resolve is not None and src) else None
            if href is None:
                _drop_keeping_tail(img)
            else:
                img.set("src", href)
                if img.get("alt") is None:
                    img.set("alt", "")
        return body


def _drop_keeping_tail(element: etree._Element) -> None:
    parent = element.getparent()
    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)
