"""
Conversion pipeline: URL -> extracted content -> chapters -> EPUB bytes.

Generic pages go through an explicit, ordered chain of extraction strategies
(heuristic first, headless-browser Readability second). Recognized social post
URLs skip the page fetch and use the social extractor alone. A conversion only
fails for lack of content once its whole chain is exhausted.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple
from urllib.parse import urlparse

from structlog.contextvars import bound_contextvars

from .chapters import ChapterSplitter
from .config import Settings, get_settings
from .errors import InsufficientContentError, InvalidURLError, NotAWebPageError
from .fetcher import PageFetcher
from .filenames import generate_filename
from .heuristic import HeuristicExtractor
from .logging import get_logger
from .models import ConversionResult, DocumentMetadata, ExtractedContent, ExtractionStrategy, FetchedPage
from .packager import DocumentPackager
from .readability import FallbackRenderExtractor, PlaywrightRenderEngine
from .social import SocialPostExtractor
from .text import primary_subtag

logger = get_logger(__name__)

MEDIA_EXTENSIONS = {
    "jpg",
    "jpeg",
    "png",
    "gif",
    "webp",
    "svg",
    "bmp",
    "mp4",
    "mov",
    "avi",
    "mp3",
    "wav",
    "pdf",
}

PageStep = Callable[[FetchedPage], Awaitable[Optional[ExtractedContent]]]


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchedPage:
        ...


def normalize_url(raw: str) -> str:
    """Trim, default to https and reject anything that is not an http(s) web page."""
    candidate = (raw or "").strip()
    if not candidate:
        raise InvalidURLError()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        raise InvalidURLError()
    last_segment = parsed.path.rsplit("/", 1)[-1]
    if "." in last_segment and last_segment.rsplit(".", 1)[-1].lower() in MEDIA_EXTENSIONS:
        raise NotAWebPageError()
    return candidate


class Converter:
    """Runs one URL or fetched page through extraction, chapter splitting and packaging.

    Components left as ``None`` get their defaults, except ``fallback``: a bare
    ``Converter()`` runs the heuristic strategy alone, since the render fallback
    needs a browser and the Readability script. Use ``from_settings`` to get the
    full two-strategy chain.
    """

    def __init__(
        self,
        heuristic: Optional[HeuristicExtractor] = None,
        fallback: Optional[FallbackRenderExtractor] = None,
        social: Optional[SocialPostExtractor] = None,
        fetcher: Optional[Fetcher] = None,
        splitter: Optional[ChapterSplitter] = None,
        packager: Optional[DocumentPackager] = None,
        unknown_author: str = "Unknown",
    ):
        self.heuristic = heuristic or HeuristicExtractor()
        self.fallback = fallback
        self.social = social or SocialPostExtractor()
        self.fetcher = fetcher or PageFetcher()
        self.splitter = splitter or ChapterSplitter()
        self.packager = packager or DocumentPackager()
        self.unknown_author = unknown_author

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Converter":
        settings = settings or get_settings()
        return cls(
            heuristic=HeuristicExtractor(min_content_length=settings.min_content_length),
            fallback=FallbackRenderExtractor(
                PlaywrightRenderEngine(readability_js=settings.readability_js),
                timeout=settings.render_timeout,
                min_content_length=settings.min_content_length,
            ),
            social=SocialPostExtractor(
                api_base=settings.social_api_base,
                platform=settings.social_platform,
                timeout=settings.http_timeout,
            ),
            fetcher=PageFetcher(timeout=settings.http_timeout, user_agent=settings.user_agent),
            splitter=ChapterSplitter(
                split_threshold=settings.split_threshold,
                max_elements=settings.max_chapter_elements,
            ),
        )

    # Extraction

    def page_chain(self) -> List[Tuple[ExtractionStrategy, PageStep]]:
        chain: List[Tuple[ExtractionStrategy, PageStep]] = [(ExtractionStrategy.HEURISTIC, self._run_heuristic)]
        if self.fallback is not None:
            chain.append((ExtractionStrategy.FALLBACK_RENDER, self._run_fallback))
        return chain

    async def _run_heuristic(self, page: FetchedPage) -> Optional[ExtractedContent]:
        return self.heuristic.extract(page.html, page.final_url)

    async def _run_fallback(self, page: FetchedPage) -> Optional[ExtractedContent]:
        return await self.fallback.extract(page.html, page.final_url, primary_subtag(page.language))

    async def extract_page(self, page: FetchedPage) -> Tuple[ExtractedContent, ExtractionStrategy]:
        for strategy, step in self.page_chain():
            content = await step(page)
            if content is not None:
                logger.info("extraction_succeeded", strategy=strategy.value)
                return content, strategy
            logger.info("extraction_strategy_failed", strategy=strategy.value)
        raise InsufficientContentError()

    async def extract_post(self, url: str) -> Tuple[ExtractedContent, ExtractionStrategy]:
        content = await asyncio.to_thread(self.social.extract, url)
        if content is None:
            logger.info("extraction_strategy_failed", strategy=ExtractionStrategy.SOCIAL_POST.value)
            raise InsufficientContentError()
        return content, ExtractionStrategy.SOCIAL_POST

    # Conversion

    def package(self, content: ExtractedContent, source_url: str, strategy: ExtractionStrategy) -> ConversionResult:
        chapters = self.splitter.split(content.body_markup, content.title)
        metadata = DocumentMetadata(
            title=content.title,
            author=content.author or self.unknown_author,
            language=content.language,
            source_url=source_url,
            description=content.description,
        )
        data = self.packager.build(chapters, metadata)
        return ConversionResult(
            content=content,
            chapters=chapters,
            strategy=strategy,
            filename=generate_filename(content.title, content.author, source_url),
            data=data,
        )

    async def convert_page(self, page: FetchedPage) -> ConversionResult:
        with bound_contextvars(url=page.final_url):
            content, strategy = await self.extract_page(page)
            return self.package(content, page.final_url, strategy)

    async def convert_post(self, url: str) -> ConversionResult:
        with bound_contextvars(url=url):
            content, strategy = await self.extract_post(url)
            return self.package(content, url, strategy)

    async def convert_url(self, raw_url: str) -> ConversionResult:
        url = normalize_url(raw_url)
        if self.social.can_handle(url):
            return await self.convert_post(url)
        with bound_contextvars(url=url):
            logger.info("fetch_started")
            page = await asyncio.to_thread(self.fetcher.fetch, url)
        return await self.convert_page(page)
