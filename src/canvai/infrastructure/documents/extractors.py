"""Per-kind text extractors behind a common ``extract(bytes)`` contract."""

from __future__ import annotations

import html
import io
import re
import zipfile
from collections.abc import Mapping

import docx

from canvai.application.content_resolver import DocumentExtractor
from canvai.application.errors import ExtractionError
from canvai.domain.documents import DocumentKind, ExtractedDocument
from canvai.infrastructure.documents.pdf import PdfExtractor

PPTX_NO_TEXT_SENTINEL = "Unable to extract text from this PowerPoint file."

# Regex scan instead of a full XML parse; entities are unescaped afterwards.
_TEXT_RUN_PATTERN = re.compile(r"<a:t(?:\s[^>]*)?>([^<]*)</a:t>")
_SLIDE_PART_PATTERN = re.compile(r"^ppt/slides/slide(\d+)\.xml$")


class PlainTextExtractor:
    """Decode bytes as UTF-8, replacing undecodable sequences."""

    strategy_name = "utf-8"

    def extract(self, data: bytes) -> ExtractedDocument:
        return ExtractedDocument(
            text=data.decode("utf-8", errors="replace"),
            strategy=self.strategy_name,
        )


class DocxExtractor:
    """Extract paragraph and table text from Word documents with python-docx."""

    strategy_name = "python-docx"

    def extract(self, data: bytes) -> ExtractedDocument:
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionError("Could not open Word document.") from exc

        lines = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    lines.append("\t".join(cells))

        core = document.core_properties
        return ExtractedDocument(
            text="\n".join(lines).strip(),
            strategy=self.strategy_name,
            title=core.title or None,
            author=core.author or None,
        )


class PptxExtractor:
    """Scan slide XML parts for ``<a:t>`` text runs, one run per output line."""

    strategy_name = "pptx-text-runs"

    def extract(self, data: bytes) -> ExtractedDocument:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                slide_parts = _ordered_slide_parts(archive.namelist())
                slide_xml = [
                    archive.read(name).decode("utf-8", errors="replace") for name in slide_parts
                ]
        except Exception as exc:
            raise ExtractionError("Could not open PowerPoint package.") from exc

        runs: list[str] = []
        for xml in slide_xml:
            for match in _TEXT_RUN_PATTERN.finditer(xml):
                text = html.unescape(match.group(1)).strip()
                if text:
                    runs.append(text)

        return ExtractedDocument(
            text="\n".join(runs) if runs else PPTX_NO_TEXT_SENTINEL,
            strategy=self.strategy_name,
            page_count=len(slide_parts),
        )


def _ordered_slide_parts(names: list[str]) -> list[str]:
    numbered: list[tuple[int, str]] = []
    for name in names:
        match = _SLIDE_PART_PATTERN.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    return [name for _, name in sorted(numbered)]


def default_extractors() -> Mapping[DocumentKind, DocumentExtractor]:
    """Return the extractor registry used by the content resolver."""
    return {
        DocumentKind.TXT: PlainTextExtractor(),
        DocumentKind.PDF: PdfExtractor(),
        DocumentKind.DOCX: DocxExtractor(),
        DocumentKind.PPTX: PptxExtractor(),
    }
