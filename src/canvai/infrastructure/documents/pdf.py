"""PDF text-layer extraction with a pypdf primary and pdfminer fallback."""

from __future__ import annotations

import io
import logging
from typing import Protocol

from pdfminer.high_level import extract_text as pdfminer_extract_text
from pdfminer.pdfpage import PDFPage
from pypdf import PdfReader

from canvai.application.errors import ExtractionError
from canvai.domain.documents import ExtractedDocument
from canvai.infrastructure.documents.quality import TextLayerQuality, assess_text_layer

LOGGER = logging.getLogger(__name__)

_PDF_HEADER = b"%PDF-"
_HEADER_SEARCH_WINDOW = 1024


class PdfTextStrategy(Protocol):
    """One way of reading a PDF text layer."""

    strategy_name: str

    def extract(self, data: bytes) -> ExtractedDocument:
        """Extract text and metadata from PDF bytes."""
        ...


class PyPdfStrategy:
    """Primary strategy using pypdf."""

    strategy_name = "pypdf"

    def extract(self, data: bytes) -> ExtractedDocument:
        reader = PdfReader(io.BytesIO(data))
        chunks = [page.extract_text() or "" for page in reader.pages]
        metadata = reader.metadata
        return ExtractedDocument(
            text="\n\n".join(chunks).strip(),
            strategy=self.strategy_name,
            page_count=len(reader.pages),
            title=_clean_metadata(metadata.title if metadata else None),
            author=_clean_metadata(metadata.author if metadata else None),
        )


class PdfMinerStrategy:
    """Fallback strategy using pdfminer.six layout analysis."""

    strategy_name = "pdfminer"

    def extract(self, data: bytes) -> ExtractedDocument:
        text = pdfminer_extract_text(io.BytesIO(data)).strip()
        page_count = sum(1 for _ in PDFPage.get_pages(io.BytesIO(data)))
        return ExtractedDocument(
            text=text,
            strategy=self.strategy_name,
            page_count=page_count,
        )


class PdfExtractor:
    """Pick the better of primary/fallback results using text-layer heuristics."""

    def __init__(
        self,
        primary: PdfTextStrategy | None = None,
        fallback: PdfTextStrategy | None = None,
    ) -> None:
        self._primary = primary or PyPdfStrategy()
        self._fallback = fallback or PdfMinerStrategy()

    def extract(self, data: bytes) -> ExtractedDocument:
        if _PDF_HEADER not in data[:_HEADER_SEARCH_WINDOW]:
            raise ExtractionError("Data is not a PDF document.")

        primary = self._run(self._primary, data)
        if primary is not None:
            primary_quality = assess_text_layer(primary.text, primary.page_count or 0)
            if not primary_quality.needs_fallback:
                return primary

        fallback = self._run(self._fallback, data)
        if fallback is None:
            if primary is None:
                raise ExtractionError("PDF text layer could not be read.")
            return primary
        if primary is None:
            return fallback

        fallback_quality = assess_text_layer(fallback.text, fallback.page_count or 0)
        if _prefer_fallback(primary_quality, fallback_quality):
            LOGGER.info(
                "event=pdf_fallback_selected strategy=%s likely_scanned=%s",
                fallback.strategy,
                fallback_quality.likely_scanned,
            )
            return ExtractedDocument(
                text=fallback.text,
                strategy=fallback.strategy,
                page_count=fallback.page_count,
                title=primary.title,
                author=primary.author,
            )
        return primary

    @staticmethod
    def _run(strategy: PdfTextStrategy, data: bytes) -> ExtractedDocument | None:
        try:
            return strategy.extract(data)
        except Exception as exc:
            LOGGER.warning(
                "event=pdf_strategy_failed strategy=%s error_type=%s",
                strategy.strategy_name,
                exc.__class__.__name__,
            )
            return None


def _prefer_fallback(primary: TextLayerQuality, fallback: TextLayerQuality) -> bool:
    if fallback.is_empty:
        return False
    if primary.is_empty:
        return True
    return fallback.score > primary.score * 1.1


def _clean_metadata(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None
