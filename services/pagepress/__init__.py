from .chapters import ChapterSplitter
from .errors import PagePressError
from .heuristic import HeuristicExtractor
from .models import Chapter, ConversionResult, DocumentMetadata, ExtractedContent, ExtractionStrategy, FetchedPage
from .packager import DocumentPackager
from .pipeline import Converter, normalize_url
from .readability import FallbackRenderExtractor, PlaywrightRenderEngine
from .sanitizer import sanitize, to_xhtml
from .social import SocialPostExtractor

__all__ = [
    "Chapter",
    "ChapterSplitter",
    "ConversionResult",
    "Converter",
    "DocumentMetadata",
    "DocumentPackager",
    "ExtractedContent",
    "ExtractionStrategy",
    "FallbackRenderExtractor",
    "FetchedPage",
    "HeuristicExtractor",
    "PagePressError",
    "PlaywrightRenderEngine",
    "SocialPostExtractor",
    "normalize_url",
    "sanitize",
    "to_xhtml",
]
