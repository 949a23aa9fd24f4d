"""
Chapter splitting for long articles.

Short bodies stay a single chapter. Long ones are cut at top-level <h2>
headings, or failing that into runs of roughly ``max_elements`` top-level
blocks, so no single XHTML file gets too large for the reader.
"""

from typing import List, Optional, Tuple

from bs4 import NavigableString, Tag

from .models import Chapter
from .sanitizer import element_text, parse_document
from .text import markup_text_length

SPLIT_THRESHOLD = 15_000
MAX_ELEMENTS_PER_CHAPTER = 50
BLOCK_END_TAGS = {"p", "div", "blockquote", "ul", "ol", "table"}

# One top-level node: (element, or None for bare text; serialized markup).
_Node = Tuple[Optional[Tag], str]


def _top_level_nodes(body: str) -> List[_Node]:
    soup = parse_document(body)
    root = soup.body
    if root is None:
        return []
    nodes: List[_Node] = []
    for child in root.children:
        if isinstance(child, Tag):
            nodes.append((child, child.decode(formatter="minimal")))
        elif isinstance(child, NavigableString) and child.strip():
            nodes.append((None, child.output_ready(formatter="minimal")))
    return nodes


def _join(markups: List[str]) -> str:
    return "\n".join(markups).strip()


class ChapterSplitter:
    def __init__(
        self,
        split_threshold: int = SPLIT_THRESHOLD,
        max_elements: int = MAX_ELEMENTS_PER_CHAPTER,
        part_label: str = "Part {number}",
    ):
        self.split_threshold = split_threshold
        self.max_elements = max_elements
        self.part_label = part_label

    def split(self, body: str, title: str) -> List[Chapter]:
        """Split sanitized body markup into ordered chapters (always at least one)."""
        single = [Chapter(index=0, title=title, body_markup=body)]
        if markup_text_length(body) < self.split_threshold:
            return single

        nodes = _top_level_nodes(body)
        chapters = self._split_at_headings(nodes, title)
        if len(chapters) > 1:
            return chapters
        chapters = self._split_by_elements(nodes, title)
        if len(chapters) > 1:
            return chapters
        return single

    def _split_at_headings(self, nodes: List[_Node], title: str) -> List[Chapter]:
        heading_positions = [
            position for position, (element, _) in enumerate(nodes)
            if element is not None and element.name == "h2"
        ]
        if len(heading_positions) < 2:
            return []

        chapters: List[Chapter] = []
        preamble = _join([markup for _, markup in nodes[: heading_positions[0]]])
        if preamble:
            chapters.append(Chapter(index=0, title=title, body_markup=preamble))

        for number, start in enumerate(heading_positions):
            end = heading_positions[number + 1] if number + 1 < len(heading_positions) else len(nodes)
            heading_text = element_text(nodes[start][0])
            chapter_title = heading_text or self.part_label.format(number=len(chapters) + 1)
            markup = _join([markup for _, markup in nodes[start:end]])
            chapters.append(Chapter(index=len(chapters), title=chapter_title, body_markup=markup))
        return chapters

    def _split_by_elements(self, nodes: List[_Node], title: str) -> List[Chapter]:
        element_total = sum(1 for element, _ in nodes if element is not None)
        if element_total <= self.max_elements:
            return []

        chapters: List[Chapter] = []
        current: List[str] = []
        count = 0

        def close() -> None:
            markup = _join(current)
            if not markup:
                return
            index = len(chapters)
            if index == 0:
                chapter_title = title
            else:
                chapter_title = f"{title} — {self.part_label.format(number=index + 1)}"
            chapters.append(Chapter(index=index, title=chapter_title, body_markup=markup))

        for element, markup in nodes:
            current.append(markup)
            if element is None:
                continue
            count += 1
            if count >= self.max_elements and element.name in BLOCK_END_TAGS:
                close()
                current = []
                count = 0
        close()
        return chapters
