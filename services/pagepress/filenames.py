import re
from datetime import date
from typing import Optional
from urllib.parse import urlparse

from .models import local_today

_UNSAFE_RE = re.compile(r'[/\\:*?"<>|]')

TITLE_MAX = 60
AUTHOR_MAX = 30


def sanitize_component(value: str, max_length: int, fallback: str = "Untitled") -> str:
    cleaned = _UNSAFE_RE.sub("", value or "").strip()
    if len(cleaned) > max_length:
        return cleaned[:max_length].strip()
    return cleaned or fallback


def generate_filename(
    title: str,
    author: Optional[str],
    url: str,
    today: Optional[date] = None,
    untitled: str = "Untitled",
) -> str:
    """Build "Title - Author - host - YYYY-MM-DD.epub"."""
    components = [sanitize_component(title, TITLE_MAX, untitled)]
    if author:
        components.append(sanitize_component(author, AUTHOR_MAX, untitled))
    components.append(urlparse(url).hostname or "unknown")
    components.append((today or local_today()).isoformat())
    return " - ".join(components) + ".epub"
