"""
Tests for ChapterSplitter.
"""

import pytest

from pagepress.chapters import ChapterSplitter
from pagepress.text import markup_text_length

pytestmark = pytest.mark.unit

TITLE = "Big Article"


def _paragraph(chars: int, word: str = "word") -> str:
    unit = f"{word} "
    return f"<p>{unit * (chars // len(unit))}</p>"


class TestSplit:
    def test_short_body_is_one_chapter(self) -> None:
        body = "<p>Short body.</p>"

        chapters = ChapterSplitter().split(body, TITLE)

        assert len(chapters) == 1
        assert chapters[0].index == 0
        assert chapters[0].title == TITLE
        assert chapters[0].body_markup == body

    def test_splits_at_h2_headings_with_preamble(self) -> None:
        """
        Given: A 15k+ character body with an intro and three <h2> sections
        When: It is split
        Then: The intro keeps the article title and each section is a chapter
        """
        body = _paragraph(300, "intro") + "".join(
            f"<h2>Section {number}</h2>{_paragraph(5200)}" for number in (1, 2, 3)
        )
        assert markup_text_length(body) >= 15_000

        chapters = ChapterSplitter().split(body, TITLE)

        assert [chapter.title for chapter in chapters] == [TITLE, "Section 1", "Section 2", "Section 3"]
        assert [chapter.index for chapter in chapters] == [0, 1, 2, 3]
        assert chapters[0].body_markup.startswith("<p>intro")
        assert chapters[2].body_markup.startswith("<h2>Section 2</h2>")
        assert "<h2>Section 3</h2>" not in chapters[2].body_markup

    def test_empty_heading_gets_part_label(self) -> None:
        body = f"<h2></h2>{_paragraph(8000)}<h2>Second</h2>{_paragraph(8000)}"

        chapters = ChapterSplitter().split(body, TITLE)

        assert [chapter.title for chapter in chapters] == ["Part 1", "Second"]

    def test_single_heading_and_few_elements_stays_single(self) -> None:
        body = f"<h2>Only</h2>{_paragraph(8000)}{_paragraph(8000)}"

        chapters = ChapterSplitter().split(body, TITLE)

        assert len(chapters) == 1
        assert chapters[0].body_markup == body

    def test_splits_by_element_count(self) -> None:
        """
        Given: 120 paragraphs of ~200 characters and no headings
        When: It is split
        Then: Chapters of 50, 50 and 20 paragraphs come back, titled by part
        """
        body = "".join(_paragraph(200) for _ in range(120))

        chapters = ChapterSplitter().split(body, TITLE)

        assert [chapter.title for chapter in chapters] == [TITLE, f"{TITLE} — Part 2", f"{TITLE} — Part 3"]
        assert [chapter.body_markup.count("<p>") for chapter in chapters] == [50, 50, 20]

    def test_chapter_only_closes_after_block_element(self) -> None:
        blocks = [_paragraph(200) for _ in range(49)] + ["<h3>Not a break</h3>", _paragraph(200)]
        body = "".join(blocks + [_paragraph(200) for _ in range(40)])

        chapters = ChapterSplitter().split(body, TITLE)

        assert len(chapters) == 2
        assert "<h3>Not a break</h3>" in chapters[0].body_markup
        assert chapters[0].body_markup.count("<p>") == 50

    def test_text_between_elements_is_kept(self) -> None:
        body = "".join(_paragraph(200) for _ in range(80)) + "trailing words" + _paragraph(200)

        chapters = ChapterSplitter().split(body, TITLE)

        assert len(chapters) == 2
        assert "trailing words" in chapters[-1].body_markup

    def test_thresholds_are_configurable(self) -> None:
        body = "".join(_paragraph(100) for _ in range(12))

        chapters = ChapterSplitter(split_threshold=1_000, max_elements=5).split(body, TITLE)

        assert [chapter.body_markup.count("<p>") for chapter in chapters] == [5, 5, 2]

    def test_one_heading_falls_back_to_element_split(self) -> None:
        body = "<h2>Lonely heading</h2>" + "".join(_paragraph(200) for _ in range(99))

        chapters = ChapterSplitter().split(body, TITLE)

        assert [chapter.title for chapter in chapters] == [TITLE, f"{TITLE} — Part 2"]
        assert chapters[0].body_markup.startswith("<h2>Lonely heading</h2>")


class TestContentPreservation:
    """Concatenated chapters hold every top-level element once, in order."""

    @staticmethod
    def _markers_in(chapters) -> list:
        joined = "".join(chapter.body_markup for chapter in chapters)
        return [int(chunk.split("</p>", 1)[0]) for chunk in joined.split("<p>marker-")[1:]]

    def test_element_split_preserves_order(self) -> None:
        body = "".join(f"<p>marker-{i}</p>{_paragraph(300)}" for i in range(60))

        chapters = ChapterSplitter().split(body, TITLE)

        assert len(chapters) > 1
        assert self._markers_in(chapters) == list(range(60))

    def test_heading_split_preserves_order(self) -> None:
        sections = "".join(
            f"<h2>Section {s}</h2>" + "".join(f"<p>marker-{s * 10 + i}</p>{_paragraph(600)}" for i in range(10))
            for s in range(3)
        )

        chapters = ChapterSplitter().split(_paragraph(100) + sections, TITLE)

        assert len(chapters) == 4
        assert self._markers_in(chapters) == list(range(30))
