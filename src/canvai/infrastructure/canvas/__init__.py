"""Canvas LMS infrastructure package."""

from canvai.infrastructure.canvas.client import CanvasClient, normalize_domain

__all__ = ["CanvasClient", "normalize_domain"]
