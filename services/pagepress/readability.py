"""
Last-resort extraction with Mozilla Readability running in a headless browser.

Only used when the heuristic extractor gives up. The rendering engine sits
behind the small ``RenderEngine`` interface so the ordering, timeout and
fallback rules here do not depend on which browser backs it.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Protocol

from .errors import RenderNavigationError, RenderTimeoutError
from .logging import get_logger
from .models import ExtractedContent, RawExtraction
from .sanitizer import sanitize, to_xhtml
from .text import condensed

logger = get_logger(__name__)

RENDER_TIMEOUT = 30.0
MIN_CONTENT_LENGTH = 400

EXTRACTION_SCRIPT = """
() => {
    try {
        var article = new Readability(document.cloneNode(true)).parse();
        if (article) {
            return JSON.stringify({
                title: article.title || '',
                content: article.content || '',
                textContent: article.textContent || '',
                byline: article.byline || '',
                excerpt: article.excerpt || ''
            });
        }
        return null;
    } catch (e) {
        return null;
    }
}
"""


class RenderEngine(Protocol):
    async def render_and_extract(self, html: str, base_url: str, timeout: float) -> Optional[RawExtraction]:
        ...


def load_readability_source(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError:
        logger.warning("readability_script_missing", path=str(path))
        return None


class PlaywrightRenderEngine:
    """Render a page in headless Chromium and run Readability.js over it.

    Every call launches its own browser. The fetched HTML is served at
    ``base_url`` by request interception so relative links resolve against the
    original page, while every other request (images, scripts, styles) is
    aborted.
    """

    def __init__(self, readability_js: Optional[Path] = None, source: Optional[str] = None):
        self._readability_js = readability_js
        self._source = source

    def _script_source(self) -> Optional[str]:
        if self._source is None:
            self._source = load_readability_source(self._readability_js)
        return self._source

    async def _run_readability(self, browser, html: str, base_url: str, timeout: float, source: str):
        context = await browser.new_context(bypass_csp=True, service_workers="block")
        page = await context.new_page()
        page.set_default_timeout(timeout * 1000)

        async def handle_route(route):
            request = route.request
            if request.is_navigation_request() and request.frame == page.main_frame:
                await route.fulfill(status=200, content_type="text/html; charset=utf-8", body=html)
            else:
                await route.abort()

        await page.route("**/*", handle_route)
        await page.goto(base_url, wait_until="domcontentloaded")
        await page.add_script_tag(content=source)
        return await page.evaluate(EXTRACTION_SCRIPT)

    async def render_and_extract(self, html: str, base_url: str, timeout: float) -> Optional[RawExtraction]:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError
        from playwright.async_api import async_playwright

        source = self._script_source()
        if source is None:
            return None

        # Launch and driver failures map the same way as navigation failures.
        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True)
                try:
                    result = await self._run_readability(browser, html, base_url, timeout, source)
                finally:
                    await browser.close()
        except PlaywrightTimeoutError as exc:
            raise RenderTimeoutError(str(exc)) from exc
        except PlaywrightError as exc:
            raise RenderNavigationError(str(exc)) from exc

        if not isinstance(result, str):
            return None
        try:
            payload = json.loads(result)
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None
        return RawExtraction.from_payload(payload)


class FallbackRenderExtractor:
    def __init__(
        self,
        engine: RenderEngine,
        timeout: float = RENDER_TIMEOUT,
        min_content_length: int = MIN_CONTENT_LENGTH,
        untitled: str = "Untitled",
    ):
        self.engine = engine
        self.timeout = timeout
        self.min_content_length = min_content_length
        self.untitled = untitled

    async def extract(self, html: str, base_url: str, language: str = "en") -> Optional[ExtractedContent]:
        try:
            raw = await asyncio.wait_for(
                self.engine.render_and_extract(html, base_url, self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("render_timeout", kind=RenderTimeoutError.kind, timeout=self.timeout)
            return None
        except RenderTimeoutError as exc:
            logger.warning("render_timeout", kind=exc.kind, error=str(exc))
            return None
        except RenderNavigationError as exc:
            logger.warning("render_navigation_failed", kind=exc.kind, error=str(exc))
            return None

        if raw is None:
            return None
        if len(raw.text_content) < self.min_content_length:
            logger.info("render_content_too_short", text_length=len(raw.text_content))
            return None

        sanitized = sanitize(raw.content)
        return ExtractedContent(
            title=condensed(raw.title) or self.untitled,
            author=condensed(raw.byline) or None,
            description=condensed(raw.excerpt),
            language=language,
            body_markup=to_xhtml(sanitized),
        )
