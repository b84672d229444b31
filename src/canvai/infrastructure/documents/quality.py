"""Heuristics for judging PDF text-layer extraction output."""

from __future__ import annotations

from dataclasses import dataclass

_MIN_CHARS_PER_PAGE = 60
_MAX_GARBAGE_RATIO = 0.2


@dataclass(frozen=True)
class TextLayerQuality:
    """Quality assessment of text pulled from a PDF text layer."""

    score: float
    garbage_ratio: float
    is_empty: bool
    sparse: bool
    garbled: bool

    @property
    def needs_fallback(self) -> bool:
        return self.is_empty or self.sparse or self.garbled

    @property
    def likely_scanned(self) -> bool:
        return self.is_empty or self.sparse


def assess_text_layer(text: str, page_count: int) -> TextLayerQuality:
    """Score extracted text by length, density per page and unprintable characters."""
    stripped = text.strip()
    if not stripped:
        return TextLayerQuality(
            score=0.0,
            garbage_ratio=1.0,
            is_empty=True,
            sparse=True,
            garbled=False,
        )

    visible = [char for char in stripped if not char.isspace()]
    garbage = sum(1 for char in visible if char == "\ufffd" or not char.isprintable())
    garbage_ratio = garbage / len(visible) if visible else 1.0
    chars_per_page = len(stripped) / max(page_count, 1)

    return TextLayerQuality(
        score=max(len(stripped) - garbage_ratio * 100, 0.0),
        garbage_ratio=garbage_ratio,
        is_empty=False,
        sparse=chars_per_page < _MIN_CHARS_PER_PAGE,
        garbled=garbage_ratio > _MAX_GARBAGE_RATIO,
    )
