import enum
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional
from urllib.parse import urlparse

from dateutil import tz


class ExtractionStrategy(str, enum.Enum):
    HEURISTIC = "heuristic"
    FALLBACK_RENDER = "fallback_render"
    SOCIAL_POST = "social_post"


@dataclass(frozen=True)
class ExtractedContent:
    title: str
    author: Optional[str]
    description: str
    language: str
    body_markup: str


@dataclass(frozen=True)
class Chapter:
    index: int
    title: str
    body_markup: str


@dataclass(frozen=True)
class RawExtraction:
    """Readability output as handed back by a render engine."""

    title: str = ""
    content: str = ""
    text_content: str = ""
    byline: str = ""
    excerpt: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "RawExtraction":
        def value(key: str) -> str:
            raw = payload.get(key)
            return raw if isinstance(raw, str) else ""

        return cls(
            title=value("title"),
            content=value("content"),
            text_content=value("textContent"),
            byline=value("byline"),
            excerpt=value("excerpt"),
        )


@dataclass(frozen=True)
class FetchedPage:
    html: str
    final_url: str
    language: str = "en"


def local_today() -> date:
    tzinfo = tz.gettz(os.environ.get("TZ", "UTC"))
    return datetime.now(tzinfo).date()


@dataclass(frozen=True)
class DocumentMetadata:
    title: str
    author: str
    language: str
    source_url: str
    description: str
    build_date: Optional[date] = None
    unknown_publisher: str = "Unknown"

    @property
    def publisher(self) -> str:
        host = urlparse(self.source_url).hostname if self.source_url else None
        return host or self.unknown_publisher

    @property
    def date(self) -> str:
        return (self.build_date or local_today()).isoformat()


@dataclass
class ConversionResult:
    content: ExtractedContent
    chapters: List[Chapter]
    strategy: ExtractionStrategy
    filename: str
    data: bytes = field(repr=False)
