"""
Tests for EPUB download file naming.
"""

from datetime import date

import pytest

from pagepress.filenames import generate_filename, sanitize_component

pytestmark = pytest.mark.unit

TODAY = date(2025, 1, 2)


class TestGenerateFilename:
    def test_full_name(self) -> None:
        name = generate_filename("My: Article?", "Jane Doe", "https://www.example.com/x", today=TODAY)

        assert name == "My Article - Jane Doe - www.example.com - 2025-01-02.epub"

    def test_author_omitted_when_missing(self) -> None:
        assert generate_filename("Title", None, "https://example.com", today=TODAY) == (
            "Title - example.com - 2025-01-02.epub"
        )
        assert generate_filename("Title", "", "https://example.com", today=TODAY) == (
            "Title - example.com - 2025-01-02.epub"
        )

    def test_empty_title_and_missing_host(self) -> None:
        assert generate_filename("", None, "not a url", today=TODAY) == "Untitled - unknown - 2025-01-02.epub"

    def test_long_components_are_capped(self) -> None:
        name = generate_filename("T" * 100, "A" * 50, "https://example.com", today=TODAY)

        title, author, *_ = name.split(" - ")
        assert len(title) == 60
        assert len(author) == 30

    def test_no_unsafe_characters(self) -> None:
        name = generate_filename('a/b\\c:d*e?f"g<h>i|j', "x|y", "https://example.com", today=TODAY)

        assert not any(char in name for char in '/\\:*?"<>|')


class TestSanitizeComponent:
    def test_only_unsafe_characters_falls_back(self) -> None:
        assert sanitize_component("???", 60) == "Untitled"

    def test_trims_whitespace(self) -> None:
        assert sanitize_component("  spaced  ", 60) == "spaced"
