"""Length caps for extracted text."""

from __future__ import annotations

from canvai.domain.documents import ExtractionResult

EXTRACTION_MAX_CHARS = 100_000
TRUNCATION_NOTE = (
    "\n\n[Note: This content has been truncated as it exceeds the maximum length. "
    "The original document contains more information.]"
)


def truncate(text: str, max_length: int) -> ExtractionResult:
    """Cap text at ``max_length`` characters and append a visible note when cut."""
    if max_length < 0:
        raise ValueError("max_length must be >= 0")
    if len(text) <= max_length:
        return ExtractionResult(text=text, truncated=False)
    return ExtractionResult(text=f"{text[:max_length]}{TRUNCATION_NOTE}", truncated=True)
