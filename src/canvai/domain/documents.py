"""Domain models for course documents and extracted text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DocumentKind(StrEnum):
    """Semantic document kinds derived from file extensions."""

    PDF = "pdf"
    DOCX = "docx"
    PPTX = "pptx"
    TXT = "txt"
    UNKNOWN = "unknown"


@dataclass
class SourceFile:
    """Remote course file handle with lazily populated text content.

    ``content`` stays ``None`` until the file is selected for the first time;
    after that it holds the resolved text for the rest of the session.
    """

    id: str
    name: str
    url: str
    mime_type: str
    content: str | None = None


@dataclass(frozen=True)
class ExtractionResult:
    """Text after applying a length cap."""

    text: str
    truncated: bool


@dataclass(frozen=True)
class ExtractedDocument:
    """Plain text extracted from a document plus optional metadata."""

    text: str
    strategy: str
    page_count: int | None = None
    title: str | None = None
    author: str | None = None
