"""
Heuristic article extraction.

Finds the main content region of a generic web page: known article containers
first, then text-density scoring, then the whole body. Returns None whenever
the result would be too short to be worth reading, which lets the caller move
on to the next extraction strategy.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from .logging import get_logger
from .models import ExtractedContent
from .sanitizer import element_text, parse_document, sanitize, to_xhtml
from .text import condensed, primary_subtag

logger = get_logger(__name__)

MIN_CONTENT_LENGTH = 400
PARAGRAPH_BONUS = 100
MIN_PARAGRAPHS = 2
MIN_TITLE_PREFIX = 10

TITLE_SEPARATORS = (" | ", " - ", " — ", " :: ", " » ")

AUTHOR_SELECTORS = (
    "meta[name=author]",
    "meta[property='article:author']",
    "meta[property='og:article:author']",
    "[rel=author]",
    ".author",
    ".byline",
    "[itemprop=author]",
)

ARTICLE_SELECTORS = (
    "article",
    "[role=main]",
    "main",
    ".post-content",
    ".article-content",
    ".article-body",
    ".entry-content",
    ".post-body",
    ".story-body",
    "#article-body",
    "#article-content",
    ".content-body",
)

DENSITY_CANDIDATES = ["div", "section", "td"]


def _meta_content(doc: BeautifulSoup, selector: str) -> str:
    element = doc.select_one(selector)
    if element is None:
        return ""
    return condensed(element.get("content") or "")


def strip_site_suffix(title: str) -> str:
    """Drop a trailing " | Site Name" style suffix when a meaningful prefix remains."""
    for separator in TITLE_SEPARATORS:
        position = title.rfind(separator)
        if position == -1:
            continue
        candidate = title[:position].strip()
        if len(candidate) > MIN_TITLE_PREFIX:
            return candidate
    return title


class HeuristicExtractor:
    def __init__(self, min_content_length: int = MIN_CONTENT_LENGTH, untitled: str = "Untitled"):
        self.min_content_length = min_content_length
        self.untitled = untitled

    def extract(self, raw_html: str, url: str) -> Optional[ExtractedContent]:
        doc = parse_document(raw_html)

        title = self.extract_title(doc)
        author = self.extract_author(doc)
        description = self.extract_description(doc)
        html_el = doc.find("html")
        language = primary_subtag(html_el.get("lang") if html_el is not None else None)

        body_html = self.extract_body(doc)
        if body_html is None:
            logger.info("heuristic_no_candidate", url=url)
            return None

        sanitized = sanitize(body_html)
        text_length = len(element_text(parse_document(sanitized)))
        if text_length < self.min_content_length:
            logger.info("heuristic_content_too_short", url=url, text_length=text_length)
            return None

        return ExtractedContent(
            title=title,
            author=author,
            description=description,
            language=language,
            body_markup=to_xhtml(sanitized),
        )

    # Metadata

    def extract_title(self, doc: BeautifulSoup) -> str:
        og_title = _meta_content(doc, "meta[property='og:title']")
        if og_title:
            return og_title
        meta_title = _meta_content(doc, "meta[name=title]")
        if meta_title:
            return meta_title
        title_el = doc.find("title")
        doc_title = condensed(title_el.get_text()) if title_el is not None else ""
        if doc_title:
            return strip_site_suffix(doc_title)
        h1_text = element_text(doc.find("h1"))
        if h1_text:
            return h1_text
        return self.untitled

    def extract_author(self, doc: BeautifulSoup) -> Optional[str]:
        for selector in AUTHOR_SELECTORS:
            element = doc.select_one(selector)
            if element is None:
                continue
            content = condensed(element.get("content") or "")
            if content:
                return content
            text = element_text(element)
            if text:
                return text
        return None

    def extract_description(self, doc: BeautifulSoup) -> str:
        og_description = _meta_content(doc, "meta[property='og:description']")
        if og_description:
            return og_description
        return _meta_content(doc, "meta[name=description]")

    # Body

    def extract_body(self, doc: BeautifulSoup) -> Optional[str]:
        for selector in ARTICLE_SELECTORS:
            element = doc.select_one(selector)
            if element is None:
                continue
            if len(element_text(element)) >= self.min_content_length:
                logger.debug("heuristic_container_match", selector=selector)
                return element.decode_contents()

        body = doc.body
        if body is None:
            return None

        best = self._best_scoring(body)
        if best is not None:
            return best.decode_contents()

        if len(element_text(body)) >= self.min_content_length:
            logger.debug("heuristic_full_body")
            return body.decode_contents()
        return None

    def _best_scoring(self, body: Tag) -> Optional[Tag]:
        best: Optional[Tag] = None
        best_score = 0
        for candidate in body.find_all(DENSITY_CANDIDATES):
            text_length = len(element_text(candidate))
            paragraphs = len(candidate.find_all("p"))
            score = text_length + paragraphs * PARAGRAPH_BONUS
            if score > best_score and text_length >= self.min_content_length and paragraphs >= MIN_PARAGRAPHS:
                best = candidate
                best_score = score
        if best is not None:
            logger.debug("heuristic_density_match", tag=best.name, score=best_score)
        return best
