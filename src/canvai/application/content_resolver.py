"""Turn a course file reference into text usable as chat context.

The resolver never raises: fetch failures, unsupported kinds and broken
documents all degrade to a descriptive string so one bad file cannot break
the surrounding chat flow. Memoization of the result belongs to the caller
(see ``FileSelection``), which owns ``SourceFile.content``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from canvai.application.document_types import classify
from canvai.application.errors import CanvasError, ExtractionError
from canvai.application.truncation import EXTRACTION_MAX_CHARS, truncate
from canvai.domain.documents import DocumentKind, ExtractedDocument, SourceFile

LOGGER = logging.getLogger(__name__)

MISSING_URL_MESSAGE = "Error loading file content: file has no download URL."
FETCH_ERROR_PREFIX = "Error loading file content: "
EXTRACTION_FALLBACKS: Mapping[DocumentKind, str] = {
    DocumentKind.PDF: (
        "This PDF file could not be processed. "
        "It may be scanned, encrypted, or damaged."
    ),
    DocumentKind.DOCX: (
        "This Word document could not be processed. "
        "Legacy .doc files and damaged documents are not supported."
    ),
    DocumentKind.PPTX: (
        "This PowerPoint file could not be processed. "
        "Legacy .ppt files and damaged presentations are not supported."
    ),
    DocumentKind.TXT: "This text file could not be processed.",
}


class ByteFetcher(Protocol):
    """Port for authenticated downloads of file bytes."""

    async def download(self, url: str) -> bytes:
        """Return raw bytes or raise ``CanvasError``."""
        ...


class DocumentExtractor(Protocol):
    """Port for per-kind text extraction."""

    def extract(self, data: bytes) -> ExtractedDocument:
        """Return extracted text or raise ``ExtractionError``."""
        ...


def unsupported_placeholder(file: SourceFile) -> str:
    """Describe a file whose kind has no text extractor."""
    mime_type = file.mime_type or "unknown type"
    return f"This file ({file.name}, {mime_type}) cannot be displayed as text."


def is_degraded_content(file: SourceFile, text: str) -> bool:
    """Return whether ``text`` is a resolver failure string rather than document text."""
    return (
        text.startswith(FETCH_ERROR_PREFIX)
        or text in EXTRACTION_FALLBACKS.values()
        or text == unsupported_placeholder(file)
    )


class ContentResolver:
    """Fetch, classify, extract and truncate one file at a time."""

    def __init__(
        self,
        fetcher: ByteFetcher,
        extractors: Mapping[DocumentKind, DocumentExtractor],
        *,
        max_chars: int = EXTRACTION_MAX_CHARS,
    ) -> None:
        self._fetcher = fetcher
        self._extractors = extractors
        self._max_chars = max_chars

    async def resolve(self, file: SourceFile) -> str:
        """Return usable text for ``file``; failures become explanatory strings."""
        if file.content is not None:
            return file.content

        kind = classify(file.name)
        extractor = self._extractors.get(kind)
        if kind is DocumentKind.UNKNOWN or extractor is None:
            LOGGER.info(
                "event=document_unsupported file_id=%s kind=%s mime_type=%s",
                file.id,
                kind.value,
                file.mime_type or "-",
            )
            return unsupported_placeholder(file)

        if not file.url:
            LOGGER.warning("event=document_missing_url file_id=%s", file.id)
            return MISSING_URL_MESSAGE

        try:
            data = await self._fetcher.download(file.url)
        except CanvasError as exc:
            LOGGER.warning(
                "event=document_fetch_failed file_id=%s kind=%s status_code=%s error_type=%s",
                file.id,
                kind.value,
                exc.status_code if exc.status_code is not None else "-",
                exc.__class__.__name__,
            )
            return f"{FETCH_ERROR_PREFIX}{exc}"

        try:
            extracted = extractor.extract(data)
        except ExtractionError as exc:
            LOGGER.warning(
                "event=document_extraction_failed file_id=%s kind=%s size=%s reason=%s",
                file.id,
                kind.value,
                len(data),
                exc,
            )
            return EXTRACTION_FALLBACKS[kind]

        result = truncate(extracted.text, self._max_chars)
        LOGGER.info(
            (
                "event=document_resolved file_id=%s kind=%s strategy=%s "
                "page_count=%s length=%s truncated=%s"
            ),
            file.id,
            kind.value,
            extracted.strategy,
            extracted.page_count if extracted.page_count is not None else "-",
            len(result.text),
            result.truncated,
        )
        return result.text
