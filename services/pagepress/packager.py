"""
EPUB 2.0 packaging.

Archive layout (entry order matters, readers sniff the first bytes):

    mimetype                  stored, "application/epub+zip"
    META-INF/container.xml    deflated, points at OEBPS/content.opf
    OEBPS/content.opf         OPF 2.0 package document
    OEBPS/toc.ncx             NCX 2005-1 navigation
    OEBPS/content.xhtml       single-chapter documents
    OEBPS/chapter-{i}.xhtml   multi-chapter documents, one per chapter
"""

import io
import time
import uuid
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .errors import ArchiveCreationError, ArchiveSerializationError, EmptyChapterSetError
from .logging import get_logger
from .models import Chapter, DocumentMetadata

logger = get_logger(__name__)

MIMETYPE = "application/epub+zip"
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
SINGLE_DOCUMENT = "content.xhtml"

_environment: Optional[Environment] = None


def get_environment() -> Environment:
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("xml", "opf", "ncx", "xhtml")),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
    return _environment


def _zip_entry(path: str, compress_type: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(filename=path, date_time=time.localtime()[:6])
    info.compress_type = compress_type
    info.external_attr = 0o644 << 16
    return info


class DocumentPackager:
    def __init__(self, environment: Optional[Environment] = None):
        self.environment = environment or get_environment()

    def _documents(self, chapters: Sequence[Chapter], metadata: DocumentMetadata) -> List[dict]:
        if len(chapters) == 1:
            chapter = chapters[0]
            return [
                {
                    "id": "content",
                    "href": SINGLE_DOCUMENT,
                    "title": metadata.title,
                    "heading": metadata.title,
                    "body": chapter.body_markup,
                }
            ]
        return [
            {
                "id": f"chapter-{chapter.index}",
                "href": f"chapter-{chapter.index}.xhtml",
                "title": chapter.title,
                "heading": metadata.title if position == 0 else None,
                "body": chapter.body_markup,
            }
            for position, chapter in enumerate(sorted(chapters, key=lambda item: item.index))
        ]

    def render_entries(self, chapters: Sequence[Chapter], metadata: DocumentMetadata) -> List[tuple]:
        """Render every compressed entry as ``(archive path, text)`` in archive order."""
        if not chapters:
            raise EmptyChapterSetError()

        identifier = str(uuid.uuid4())
        documents = self._documents(chapters, metadata)
        context = {"uuid": identifier, "metadata": metadata, "documents": documents}

        entries = [
            ("META-INF/container.xml", self.environment.get_template("container.xml").render()),
            ("OEBPS/content.opf", self.environment.get_template("content.opf").render(**context)),
            ("OEBPS/toc.ncx", self.environment.get_template("toc.ncx").render(**context)),
        ]
        chapter_template = self.environment.get_template("chapter.xhtml")
        for document in documents:
            xhtml = chapter_template.render(
                language=metadata.language,
                title=document["title"],
                heading=document["heading"],
                body=document["body"],
            )
            entries.append((f"OEBPS/{document['href']}", xhtml))
        return entries

    def build(self, chapters: Sequence[Chapter], metadata: DocumentMetadata) -> bytes:
        """Assemble the EPUB archive and return its bytes."""
        entries = self.render_entries(chapters, metadata)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(_zip_entry("mimetype", zipfile.ZIP_STORED), MIMETYPE.encode("ascii"))
                for path, text in entries:
                    archive.writestr(_zip_entry(path, zipfile.ZIP_DEFLATED), text.encode("utf-8"))
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise ArchiveCreationError(f"Failed to create EPUB archive: {exc}") from exc

        try:
            data = buffer.getvalue()
        except ValueError as exc:
            raise ArchiveSerializationError(f"Failed to extract EPUB data from archive: {exc}") from exc
        if not data:
            raise ArchiveSerializationError()

        logger.info("epub_built", chapters=len(chapters), size=len(data))
        return data
