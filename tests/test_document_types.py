"""Unit tests for filename classification and truncation."""

from __future__ import annotations

import pytest

from canvai.application.document_types import classify
from canvai.application.truncation import TRUNCATION_NOTE, truncate
from canvai.domain.documents import DocumentKind


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("Lecture 1.PDF", DocumentKind.PDF),
        ("essay.doc", DocumentKind.DOCX),
        ("essay.docx", DocumentKind.DOCX),
        ("slides.ppt", DocumentKind.PPTX),
        ("slides.final.pptx", DocumentKind.PPTX),
        ("README.md", DocumentKind.TXT),
        ("app.tsx", DocumentKind.TXT),
        ("data.json", DocumentKind.TXT),
        ("photo.png", DocumentKind.UNKNOWN),
        ("Makefile", DocumentKind.UNKNOWN),
        ("archive.", DocumentKind.UNKNOWN),
    ],
)
def test_classify_maps_extension_case_insensitively(filename: str, expected: DocumentKind) -> None:
    assert classify(filename) is expected


def test_truncate_keeps_text_within_limit() -> None:
    result = truncate("hello", 5)

    assert result.text == "hello"
    assert result.truncated is False


def test_truncate_cuts_and_appends_note() -> None:
    result = truncate("a" * 120, 100)

    assert result.truncated is True
    assert result.text == "a" * 100 + TRUNCATION_NOTE
    assert "has been truncated" in result.text


def test_truncate_zero_limit_keeps_only_note() -> None:
    result = truncate("abc", 0)

    assert result.text == TRUNCATION_NOTE
    assert result.truncated is True


def test_truncate_rejects_negative_limit() -> None:
    with pytest.raises(ValueError):
        truncate("abc", -1)
