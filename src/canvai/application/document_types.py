"""Filename-based document kind classification."""

from __future__ import annotations

from canvai.domain.documents import DocumentKind

_KIND_BY_EXTENSION: dict[str, DocumentKind] = {
    "pdf": DocumentKind.PDF,
    "doc": DocumentKind.DOCX,
    "docx": DocumentKind.DOCX,
    "ppt": DocumentKind.PPTX,
    "pptx": DocumentKind.PPTX,
    "txt": DocumentKind.TXT,
    "md": DocumentKind.TXT,
    "js": DocumentKind.TXT,
    "ts": DocumentKind.TXT,
    "jsx": DocumentKind.TXT,
    "tsx": DocumentKind.TXT,
    "html": DocumentKind.TXT,
    "css": DocumentKind.TXT,
    "json": DocumentKind.TXT,
}


def classify(filename: str) -> DocumentKind:
    """Map filename extension to document kind; unmapped names are ``unknown``."""
    _, dot, extension = filename.rpartition(".")
    if not dot:
        return DocumentKind.UNKNOWN
    return _KIND_BY_EXTENSION.get(extension.lower(), DocumentKind.UNKNOWN)
