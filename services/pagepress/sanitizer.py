"""
Markup sanitizer for EPUB bodies.

Reduces arbitrary page markup to a text-only XHTML subset: no scripting,
styling hooks, media, forms, page chrome, attributes or hyperlinks.
"""

from typing import Optional

import bleach
from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, ProcessingInstruction, Tag
from bs4.builder import ParserRejectedMarkup

from .errors import InvalidMarkupError
from .text import condensed, strip_xml_illegal

PARSER = "lxml"

REMOVE_WITH_CONTENT = {
    "script",
    "style",
    "noscript",
    "iframe",
    "frame",
    "frameset",
    "object",
    "embed",
    "applet",
    "form",
    "input",
    "textarea",
    "select",
    "button",
    "video",
    "audio",
    "source",
    "canvas",
    "svg",
    "math",
    "template",
    # text-only output
    "img",
    "picture",
    "figure",
    # page chrome
    "nav",
    "footer",
    "aside",
    "header",
}

CHROME_CLASS_MARKERS = (
    "share",
    "social",
    "comment",
    "related",
    "sidebar",
    "advertisement",
    "ad-",
    "popup",
)
CHROME_ID_MARKERS = ("comment", "sidebar")

ALLOWED_TAGS = {
    "abbr",
    "b",
    "blockquote",
    "br",
    "caption",
    "cite",
    "code",
    "dd",
    "del",
    "div",
    "dl",
    "dt",
    "em",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
    "i",
    "ins",
    "kbd",
    "li",
    "ol",
    "p",
    "pre",
    "q",
    "samp",
    "small",
    "span",
    "strong",
    "sub",
    "sup",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "ul",
    "var",
}

# XHTML 1.1 has no HTML5 sectioning or figure elements.
XHTML_EQUIVALENTS = {
    "article": "div",
    "figcaption": "p",
    "main": "div",
    "s": "del",
    "section": "div",
}

_DOCUMENT_ROOTS = {"html", "head", "body"}
_DROPPED_NODES = (CData, Comment, Declaration, Doctype, ProcessingInstruction)


def parse_document(markup: str) -> BeautifulSoup:
    """Parse markup into a document tree, raising InvalidMarkupError on rejection."""
    if markup is None:
        raise InvalidMarkupError("No markup to parse.")
    try:
        return BeautifulSoup(markup, PARSER)
    except (ParserRejectedMarkup, TypeError) as exc:
        raise InvalidMarkupError(f"The page HTML could not be parsed: {exc}") from exc


def element_text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return condensed(element.get_text(" "))


def _attribute_value(element: Tag, name: str) -> str:
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def _is_chrome(element: Tag) -> bool:
    class_value = _attribute_value(element, "class")
    if class_value and any(marker in class_value for marker in CHROME_CLASS_MARKERS):
        return True
    id_value = _attribute_value(element, "id")
    if id_value and any(marker in id_value for marker in CHROME_ID_MARKERS):
        return True
    return False


def _remove_unwanted(soup: BeautifulSoup) -> None:
    for element in soup.find_all(sorted(REMOVE_WITH_CONTENT)):
        if not element.decomposed:
            element.decompose()
    for element in soup.find_all(True):
        if element.decomposed or element.name in _DOCUMENT_ROOTS:
            continue
        if _is_chrome(element):
            element.decompose()


def _strip_attributes(soup: BeautifulSoup) -> None:
    for element in soup.find_all(True):
        if element.name == "a" and element.has_attr("href"):
            element.attrs = {"href": element["href"]}
        else:
            element.attrs = {}


def _unwrap_links(soup: BeautifulSoup) -> None:
    for link in soup.find_all("a"):
        link.unwrap()


def _rename_to_xhtml(soup: BeautifulSoup) -> None:
    for element in soup.find_all(list(XHTML_EQUIVALENTS)):
        element.name = XHTML_EQUIVALENTS[element.name]


def sanitize(raw_markup: str) -> str:
    """Sanitize raw HTML for EPUB inclusion.

    Returns the inner markup of the document body, or an empty string when the
    parsed document has no body.
    """
    soup = parse_document(raw_markup)
    _remove_unwanted(soup)
    _strip_attributes(soup)
    _unwrap_links(soup)
    _rename_to_xhtml(soup)

    body = soup.body
    if body is None:
        return ""
    inner = body.decode_contents()
    return bleach.clean(inner, tags=ALLOWED_TAGS, attributes={}, strip=True, strip_comments=True)


def _drop_non_content(root: Tag) -> None:
    for node in list(root.descendants):
        if isinstance(node, _DROPPED_NODES):
            node.extract()


def to_xhtml(markup: str) -> str:
    """Re-serialize markup as well-formed XHTML body content.

    Void elements are self-closed, text is XML-escaped and characters that XML
    forbids are dropped.
    """
    soup = parse_document(markup)
    body = soup.body
    if body is None:
        return ""
    _drop_non_content(body)
    serialized = body.decode_contents(formatter="minimal")
    return strip_xml_illegal(serialized)
