"""
Pytest fixtures shared by the PagePress test suite.

Markers:
- @pytest.mark.unit: one component, every external service mocked
- @pytest.mark.integration: several components wired together, still no network

Nothing here touches the network or launches a browser: HTTP sessions are
MagicMocks and the fallback extractor runs against fake render engines.
"""

import asyncio
from typing import Callable, List, Optional
from unittest.mock import MagicMock

import pytest

from pagepress.config import get_settings
from pagepress.models import ExtractedContent, RawExtraction

SENTENCE = "The quick brown fox jumps over the lazy dog. "


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_article_html() -> Callable[..., str]:
    """Factory for a news-style page with the article text inside <article>."""

    def _make(
        paragraphs: int = 3,
        repeats: int = 5,
        title: str = "A Long Article Title | Example News",
        author: Optional[str] = "Jane Doe",
        lang: str = "en-US",
        extra_body: str = "",
    ) -> str:
        author_meta = f'<meta name="author" content="{author}">' if author else ""
        body = "".join(f"<p>{SENTENCE * repeats}</p>" for _ in range(paragraphs))
        return (
            f'<!DOCTYPE html><html lang="{lang}"><head><title>{title}</title>{author_meta}'
            '<meta name="description" content="What the article is about.">'
            "</head><body>"
            '<nav><a href="/">Home</a> <a href="/world">World</a></nav>'
            f"<article><h1>Headline</h1>{body}{extra_body}</article>"
            "<footer>Copyright Example News</footer>"
            "</body></html>"
        )

    return _make


@pytest.fixture
def make_content() -> Callable[..., ExtractedContent]:
    def _make(
        title: str = "Test Article",
        author: Optional[str] = "Jane Doe",
        body_markup: str = "<p>Hello world.</p>",
        language: str = "en",
    ) -> ExtractedContent:
        return ExtractedContent(
            title=title,
            author=author,
            description="A test article.",
            language=language,
            body_markup=body_markup,
        )

    return _make


class FakeRenderEngine:
    """Render engine double: returns a canned extraction, raises, or stalls."""

    def __init__(self, result: Optional[RawExtraction] = None, error: Optional[Exception] = None, delay: float = 0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []
        self.torn_down = False

    async def render_and_extract(self, html: str, base_url: str, timeout: float) -> Optional[RawExtraction]:
        self.calls.append((html, base_url, timeout))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.result
        finally:
            self.torn_down = True


@pytest.fixture
def fake_engine_factory() -> Callable[..., FakeRenderEngine]:
    return FakeRenderEngine


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for a requests.Response stand-in."""

    def _make(
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[dict] = None,
        url: str = "https://example.com/article",
        json_data: object = None,
        encoding: Optional[str] = None,
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.content = content
        response.headers = headers or {}
        response.url = url
        response.encoding = encoding
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return _make
