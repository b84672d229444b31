"""Document text extraction package."""

from canvai.infrastructure.documents.extractors import (
    PPTX_NO_TEXT_SENTINEL,
    DocxExtractor,
    PlainTextExtractor,
    PptxExtractor,
    default_extractors,
)
from canvai.infrastructure.documents.pdf import PdfExtractor

__all__ = [
    "PPTX_NO_TEXT_SENTINEL",
    "DocxExtractor",
    "PdfExtractor",
    "PlainTextExtractor",
    "PptxExtractor",
    "default_extractors",
]
