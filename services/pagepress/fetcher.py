import re
from typing import Optional

import requests

from .config import DEFAULT_USER_AGENT
from .errors import FetchError
from .models import FetchedPage
from .text import primary_subtag

_LANG_RE = re.compile(r'lang="([^"]*)"', flags=re.IGNORECASE)


def detect_language(html: str) -> Optional[str]:
    match = _LANG_RE.search(html or "")
    if not match:
        return None
    return primary_subtag(match.group(1), default="") or None


def _decode(response: requests.Response) -> str:
    raw = response.content
    declared = None
    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower():
        declared = response.encoding
    for encoding in (declared, "utf-8"):
        if not encoding:
            continue
        try:
            return raw.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue
    return raw.decode("latin-1")


class PageFetcher:
    """Download a page's HTML, following redirects and keeping the final URL."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, url: str) -> FetchedPage:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
        }
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            raise FetchError(f"Could not load the page: {exc}") from exc
        try:
            if not 200 <= response.status_code < 300:
                raise FetchError(status_code=response.status_code)
            html = _decode(response)
            final_url = response.url or url
        finally:
            response.close()

        return FetchedPage(html=html, final_url=final_url, language=detect_language(html) or "en")
