import html
import re
from typing import Optional

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
# Characters outside the XML 1.0 Char production.
_XML_ILLEGAL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def condensed(value: Optional[str]) -> str:
    """Trim and collapse every whitespace run into a single space."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value).strip()


def xml_escape(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def strip_xml_illegal(value: str) -> str:
    if not value:
        return value
    return _XML_ILLEGAL_RE.sub("", value)


def strip_tags(value: str) -> str:
    if not value:
        return ""
    return _TAG_RE.sub("", value)


def markup_text_length(value: str) -> int:
    """Length of markup with tags removed, entities left as written."""
    return len(strip_tags(value))


def plain_text(value: str) -> str:
    if not value:
        return ""
    return html.unescape(strip_tags(value))


def primary_subtag(language: Optional[str], default: str = "en") -> str:
    if not language:
        return default
    primary = language.strip().split("-", 1)[0].strip()
    return primary or default
