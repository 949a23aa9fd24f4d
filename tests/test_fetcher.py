"""
Tests for PageFetcher and document language detection.
"""

from unittest.mock import MagicMock

import pytest
import requests

from pagepress.errors import FetchError
from pagepress.fetcher import PageFetcher, detect_language

pytestmark = pytest.mark.unit

URL = "https://example.com/article"


class TestFetch:
    def test_returns_html_final_url_and_language(self, make_response) -> None:
        session = MagicMock()
        session.get.return_value = make_response(
            content='<html lang="de-AT"><body>Grüße</body></html>'.encode("utf-8"),
            headers={"Content-Type": "text/html; charset=utf-8"},
            encoding="utf-8",
            url="https://example.com/final",
        )

        page = PageFetcher(session=session).fetch(URL)

        assert page.final_url == "https://example.com/final"
        assert page.language == "de"
        assert "Grüße" in page.html

    def test_sends_mobile_user_agent_and_follows_redirects(self, make_response) -> None:
        session = MagicMock()
        session.get.return_value = make_response(content=b"<html></html>")

        PageFetcher(session=session, timeout=7.5).fetch(URL)

        args, kwargs = session.get.call_args
        assert args[0] == URL
        assert "iPhone" in kwargs["headers"]["User-Agent"]
        assert kwargs["headers"]["Accept"] == "text/html,application/xhtml+xml"
        assert kwargs["timeout"] == 7.5
        assert kwargs["allow_redirects"] is True

    def test_error_status_raises_with_code(self, make_response) -> None:
        response = make_response(status_code=404)
        session = MagicMock()
        session.get.return_value = response

        with pytest.raises(FetchError) as exc_info:
            PageFetcher(session=session).fetch(URL)

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Server returned error 404."
        response.close.assert_called_once()

    def test_transport_error_raises(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(FetchError) as exc_info:
            PageFetcher(session=session).fetch(URL)

        assert exc_info.value.status_code is None

    def test_undeclared_charset_falls_back_to_latin1(self, make_response) -> None:
        session = MagicMock()
        session.get.return_value = make_response(content="<p>café</p>".encode("latin-1"))

        page = PageFetcher(session=session).fetch(URL)

        assert page.html == "<p>café</p>"
        assert page.language == "en"

    def test_unknown_declared_charset_falls_back_to_utf8(self, make_response) -> None:
        session = MagicMock()
        session.get.return_value = make_response(
            content="<p>naïve</p>".encode("utf-8"),
            headers={"Content-Type": "text/html; charset=x-bogus"},
            encoding="x-bogus",
        )

        page = PageFetcher(session=session).fetch(URL)

        assert page.html == "<p>naïve</p>"


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "html,expected",
        [
            ('<html lang="en-US">', "en"),
            ("<HTML LANG=\"fr\">", "fr"),
            ('<html lang="">', None),
            ("<html>", None),
            ('<html xml:lang="ja" lang="ja-JP">', "ja"),
        ],
    )
    def test_detect_language(self, html: str, expected) -> None:
        assert detect_language(html) == expected
