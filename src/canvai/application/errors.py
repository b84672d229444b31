"""Error taxonomy for Canvas access, document extraction and aggregation."""

from __future__ import annotations


class CanvaiError(RuntimeError):
    """Base error for application failures."""


class CanvasError(CanvaiError):
    """Raised when Canvas data or file bytes cannot be fetched."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(CanvasError):
    """Raised when Canvas rejects the access token."""


class NotFoundError(CanvasError):
    """Raised when a Canvas resource does not exist or is not visible."""


class TransportError(CanvasError):
    """Raised on network failures and unexpected Canvas responses."""


class ExtractionError(CanvaiError):
    """Raised when document bytes cannot be converted to text."""


class AggregationError(CanvaiError):
    """Raised when dashboard data cannot be aggregated at all."""


class MissingCredentialsError(AggregationError):
    """Raised when Canvas domain or token is not configured."""
