import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 26_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/26.0 Mobile/15E148 Safari/604.1"
)
DEFAULT_READABILITY_JS = Path(__file__).resolve().parent / "static" / "Readability.js"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int, low: int, high: int) -> int:
    raw = os.environ.get(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(low, min(high, value))


def _env_float(name: str, default: float, low: float, high: float) -> float:
    raw = os.environ.get(name, str(default)).strip()
    try:
        value = float(raw)
    except ValueError:
        return default
    return max(low, min(high, value))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def _env_path(name: str, default: Path) -> Optional[Path]:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else default


@dataclass(frozen=True)
class Settings:
    min_content_length: int = 400
    split_threshold: int = 15_000
    max_chapter_elements: int = 50
    render_timeout: float = 30.0
    http_timeout: float = 30.0
    social_api_base: str = "https://api.fxtwitter.com"
    social_platform: str = "X"
    readability_js: Optional[Path] = DEFAULT_READABILITY_JS
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    log_json: bool = True


def load_settings() -> Settings:
    return Settings(
        min_content_length=_env_int("PAGEPRESS_MIN_CONTENT_LENGTH", 400, 1, 100_000),
        split_threshold=_env_int("PAGEPRESS_SPLIT_THRESHOLD", 15_000, 1_000, 10_000_000),
        max_chapter_elements=_env_int("PAGEPRESS_MAX_CHAPTER_ELEMENTS", 50, 5, 10_000),
        render_timeout=_env_float("PAGEPRESS_RENDER_TIMEOUT", 30.0, 1.0, 300.0),
        http_timeout=_env_float("PAGEPRESS_HTTP_TIMEOUT", 30.0, 1.0, 300.0),
        social_api_base=_env_str("PAGEPRESS_SOCIAL_API_BASE", "https://api.fxtwitter.com").rstrip("/"),
        readability_js=_env_path("PAGEPRESS_READABILITY_JS", DEFAULT_READABILITY_JS),
        user_agent=_env_str("PAGEPRESS_USER_AGENT", DEFAULT_USER_AGENT),
        log_level=_env_str("PAGEPRESS_LOG_LEVEL", "INFO").upper(),
        log_json=_env_bool("PAGEPRESS_LOG_JSON", True),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
