"""Storage port for Canvas credentials."""

from __future__ import annotations

from typing import Protocol

from canvai.domain.canvas import CanvasCredentials


class CanvasCredentialStore(Protocol):
    """Persist and load the Canvas domain and access token."""

    def get_canvas_credentials(self) -> CanvasCredentials | None:
        """Return stored credentials, or None when domain or token is missing."""
        ...

    def set_canvas_credentials(self, credentials: CanvasCredentials) -> None:
        """Persist credentials."""
        ...

    def delete_canvas_credentials(self) -> None:
        """Remove stored credentials; no-op when absent."""
        ...
