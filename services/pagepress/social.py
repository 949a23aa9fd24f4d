"""
Social post extraction through a read-only JSON proxy.

Status pages on X/Twitter are script-only applications, so their HTML carries
no article text. Instead the status URL is rewritten to the proxy's API
(``https://api.fxtwitter.com/{user}/status/{id}``) and the JSON payload is
rendered into the same ``ExtractedContent`` shape the HTML extractors produce.
Long-form X Articles arrive as Draft.js blocks; ordinary posts as plain text.
"""

import json
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import requests

from .errors import RemoteFetchError
from .logging import get_logger
from .models import ExtractedContent
from .text import plain_text, primary_subtag, xml_escape

logger = get_logger(__name__)

SUPPORTED_HOSTS = {
    "x.com",
    "www.x.com",
    "twitter.com",
    "www.twitter.com",
    "mobile.twitter.com",
}
DEFAULT_API_BASE = "https://api.fxtwitter.com"
MIN_ARTICLE_TEXT = 200
DESCRIPTION_LENGTH = 200
NO_LINGUISTIC_CONTENT = "zxx"

HEADING_TAGS = {
    "header-one": "h1",
    "header-two": "h2",
    "header-three": "h3",
}
LIST_TAGS = {
    "unordered-list-item": "ul",
    "ordered-list-item": "ol",
}


def _status_parts(url: str) -> Optional[Tuple[str, str]]:
    parsed = urlparse(url)
    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 3 or parts[1] != "status":
        return None
    return parts[0], parts[2]


def resolve_language(lang: Optional[str]) -> str:
    if not lang or lang == NO_LINGUISTIC_CONTENT:
        return "en"
    return primary_subtag(lang)


def apply_inline_styles(text: str, styles: List[dict]) -> str:
    """Render Bold/Italic style ranges over ``text`` as nested strong/em runs."""
    if not styles:
        return xml_escape(text)

    bold = [False] * len(text)
    italic = [False] * len(text)
    for style in styles:
        offset = style.get("offset")
        length = style.get("length")
        name = style.get("style")
        if not isinstance(offset, int) or not isinstance(length, int) or not isinstance(name, str):
            continue
        start = max(0, offset)
        end = min(len(text), offset + length)
        target = bold if name == "Bold" else italic if name == "Italic" else None
        if target is None:
            continue
        for i in range(start, end):
            target[i] = True

    runs: List[str] = []
    i = 0
    while i < len(text):
        j = i + 1
        while j < len(text) and bold[j] == bold[i] and italic[j] == italic[i]:
            j += 1
        segment = xml_escape(text[i:j])
        if bold[i] and italic[i]:
            runs.append(f"<strong><em>{segment}</em></strong>")
        elif bold[i]:
            runs.append(f"<strong>{segment}</strong>")
        elif italic[i]:
            runs.append(f"<em>{segment}</em>")
        else:
            runs.append(segment)
        i = j
    return "".join(runs)


def render_blocks(blocks: List[dict]) -> str:
    """Render Draft.js content blocks into XHTML.

    Consecutive list items share one list element; a change of list type or
    any non-list block closes the open list. Atomic (embedded media) and empty
    blocks produce nothing.
    """
    parts: List[str] = []
    open_list: Optional[str] = None

    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type") or "unstyled"
        text = block.get("text") or ""
        styles = block.get("inlineStyleRanges") or []
        skip = block_type == "atomic" or not text.strip()

        needed_list = LIST_TAGS.get(block_type)
        if needed_list and skip:
            continue
        if open_list is not None and open_list != needed_list:
            parts.append(f"</{open_list}>")
            open_list = None
        if skip:
            continue
        if needed_list and open_list is None:
            parts.append(f"<{needed_list}>")
            open_list = needed_list

        styled = apply_inline_styles(text, styles)
        if block_type in HEADING_TAGS:
            tag = HEADING_TAGS[block_type]
            parts.append(f"<{tag}>{styled}</{tag}>")
        elif block_type == "blockquote":
            parts.append(f"<blockquote><p>{styled}</p></blockquote>")
        elif needed_list:
            parts.append(f"<li>{styled}</li>")
        else:
            parts.append(f"<p>{styled}</p>")

    if open_list is not None:
        parts.append(f"</{open_list}>")
    return "\n".join(parts)


def _is_link_only(text: str) -> bool:
    trimmed = text.strip()
    return trimmed.startswith(("http://", "https://")) and " " not in trimmed


class SocialPostExtractor:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        api_base: str = DEFAULT_API_BASE,
        platform: str = "X",
        timeout: float = 30.0,
        untitled: str = "Untitled",
    ):
        self.session = session or requests.Session()
        self.api_base = api_base.rstrip("/")
        self.platform = platform
        self.timeout = timeout
        self.untitled = untitled

    def can_handle(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        if host not in SUPPORTED_HOSTS:
            return False
        return _status_parts(url) is not None

    def api_url(self, url: str) -> Optional[str]:
        parts = _status_parts(url)
        if parts is None:
            return None
        user, status_id = parts
        return f"{self.api_base}/{user}/status/{status_id}"

    def extract(self, url: str) -> Optional[ExtractedContent]:
        api_url = self.api_url(url)
        if api_url is None:
            return None
        try:
            response = self.session.get(api_url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as exc:
            raise RemoteFetchError(f"Read API request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.warning("social_api_error", kind=RemoteFetchError.kind, status_code=response.status_code)
            return None
        try:
            payload = response.json()
        except (ValueError, json.JSONDecodeError):
            logger.warning("social_api_malformed", kind=RemoteFetchError.kind)
            return None
        return self.parse_payload(payload)

    def parse_payload(self, payload: object) -> Optional[ExtractedContent]:
        if not isinstance(payload, dict) or not isinstance(payload.get("tweet"), dict):
            logger.warning("social_api_malformed", kind=RemoteFetchError.kind)
            return None
        tweet = payload["tweet"]
        author = tweet.get("author") if isinstance(tweet.get("author"), dict) else {}
        author_name = author.get("name") or None
        screen_name = author.get("screen_name") or None
        language = resolve_language(tweet.get("lang"))

        article = tweet.get("article")
        if isinstance(article, dict):
            return self._parse_article(article, author_name, language)
        return self._parse_post(tweet, author_name, screen_name, language)

    def _parse_article(
        self,
        article: dict,
        author_name: Optional[str],
        language: str,
    ) -> Optional[ExtractedContent]:
        content = article.get("content")
        blocks = content.get("blocks") if isinstance(content, dict) else None
        if not isinstance(blocks, list):
            return None

        body = render_blocks(blocks)
        text_length = len(plain_text(body))
        if text_length < MIN_ARTICLE_TEXT:
            logger.info("social_article_too_short", text_length=text_length)
            return None

        return ExtractedContent(
            title=article.get("title") or self.untitled,
            author=author_name,
            description=article.get("preview_text") or "",
            language=language,
            body_markup=body,
        )

    def _parse_post(
        self,
        tweet: dict,
        author_name: Optional[str],
        screen_name: Optional[str],
        language: str,
    ) -> Optional[ExtractedContent]:
        raw_text = tweet.get("raw_text")
        text = raw_text.get("text") if isinstance(raw_text, dict) else None
        if not text:
            text = tweet.get("text")
        if not text or not isinstance(text, str):
            return None
        if _is_link_only(text):
            logger.info("social_post_link_only")
            return None

        handle = f"@{screen_name}" if screen_name else self.platform
        paragraphs = [f"<p>{xml_escape(line)}</p>" for line in text.split("\n") if line.strip()]
        if not paragraphs:
            return None

        return ExtractedContent(
            title=f"{author_name or handle} on {self.platform}",
            author=author_name,
            description=text[:DESCRIPTION_LENGTH],
            language=language,
            body_markup="\n".join(paragraphs),
        )
