import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from pagepress import Converter, FetchedPage, normalize_url
from pagepress.config import get_settings
from pagepress.errors import (
    FetchError,
    InsufficientContentError,
    InvalidMarkupError,
    InvalidURLError,
    NotAWebPageError,
    PackagingError,
    PagePressError,
    RemoteFetchError,
)
from pagepress.fetcher import detect_language
from pagepress.logging import configure_logging, get_logger
from pagepress.models import ConversionResult
from pagepress.text import primary_subtag

app = FastAPI()

TEMPLATES = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
EPUB_MEDIA_TYPE = "application/epub+zip"

ERROR_STATUS = (
    (InvalidURLError, 400),
    (NotAWebPageError, 400),
    (FetchError, 502),
    (RemoteFetchError, 502),
    (InsufficientContentError, 422),
    (InvalidMarkupError, 422),
    (PackagingError, 500),
)

logger = get_logger(__name__)

_converter: Optional[Converter] = None


def get_converter() -> Converter:
    global _converter
    if _converter is None:
        _converter = Converter.from_settings(get_settings())
    return _converter


def _status_for(exc: PagePressError) -> int:
    for error_class, status_code in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return 500


def _content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "ignore").decode("ascii").strip() or "article.epub"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _epub_response(result: ConversionResult) -> Response:
    return Response(
        content=result.data,
        media_type=EPUB_MEDIA_TYPE,
        headers={
            "Content-Disposition": _content_disposition(result.filename),
            "X-Extraction-Strategy": result.strategy.value,
            "X-Chapter-Count": str(len(result.chapters)),
        },
    )


def _log_failure(exc: PagePressError, status_code: int) -> None:
    if status_code >= 500:
        logger.error("conversion_failed", kind=exc.kind, status_code=status_code, error=str(exc))
    else:
        logger.info("conversion_rejected", kind=exc.kind, status_code=status_code, error=str(exc))


async def _convert(url: str) -> ConversionResult:
    try:
        return await get_converter().convert_url(url)
    except PagePressError as exc:
        status_code = _status_for(exc)
        _log_failure(exc, status_code)
        raise HTTPException(status_code=status_code, detail=str(exc)) from exc


@app.on_event("startup")
def startup():
    configure_logging()
    logger.info("service_started", pid=os.getpid())
    readability_js = get_settings().readability_js
    if readability_js is None or not readability_js.is_file():
        logger.warning(
            "readability_script_missing",
            path=str(readability_js),
            hint="run scripts/fetch_readability.py; the render fallback is disabled until then",
        )


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return TEMPLATES.TemplateResponse(request, "index.html", {"url": "", "error": None})


@app.post("/convert")
async def convert_form(request: Request):
    form = await request.form()
    url = (form.get("url") or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="Missing url")
    try:
        result = await _convert(url)
    except HTTPException as exc:
        return TEMPLATES.TemplateResponse(
            request,
            "index.html",
            {"url": url, "error": exc.detail},
            status_code=exc.status_code,
        )
    return _epub_response(result)


@app.post("/api/convert")
async def convert_api(payload: dict):
    url = payload.get("url")
    if not url or not isinstance(url, str):
        raise HTTPException(status_code=400, detail="Missing url")
    return _epub_response(await _convert(url))


@app.post("/api/convert/html")
async def convert_html(payload: dict):
    html = payload.get("html")
    url = payload.get("url")
    if not html or not url or not isinstance(html, str) or not isinstance(url, str):
        raise HTTPException(status_code=400, detail="Missing html/url")
    try:
        final_url = normalize_url(url)
        language = payload.get("language")
        if not isinstance(language, str):
            language = None
        language = primary_subtag(language or detect_language(html))
        result = await get_converter().convert_page(FetchedPage(html=html, final_url=final_url, language=language))
    except PagePressError as exc:
        status_code = _status_for(exc)
        _log_failure(exc, status_code)
        raise HTTPException(status_code=status_code, detail=str(exc)) from exc
    return _epub_response(result)
