"""Keyring-backed storage for Canvas credentials and LLM API keys."""

from __future__ import annotations

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from canvai.application.llm import LLMServiceProvider
from canvai.domain.canvas import CanvasCredentials

_CANVAS_DOMAIN_USERNAME = "canvas:domain"
_CANVAS_TOKEN_USERNAME = "canvas:token"


class KeyringStoreError(RuntimeError):
    """Raised when keyring backend operation fails."""


class KeyringCredentialStore:
    """Store secrets using the OS keyring backend.

    ``default_domain`` is used when no domain was stored, so the domain can
    come from configuration while the token stays in the keyring.
    """

    def __init__(
        self,
        service_name: str = "canvai",
        *,
        default_domain: str | None = None,
    ) -> None:
        self._service_name = service_name
        self._default_domain = default_domain

    def get_canvas_credentials(self) -> CanvasCredentials | None:
        domain = self._read(_CANVAS_DOMAIN_USERNAME) or self._default_domain
        token = self._read(_CANVAS_TOKEN_USERNAME)
        if not domain or not token:
            return None
        return CanvasCredentials(domain=domain, token=token)

    def set_canvas_credentials(self, credentials: CanvasCredentials) -> None:
        domain = credentials.domain.strip()
        token = credentials.token.strip()
        if not domain or not token:
            raise ValueError("Canvas domain and token must not be empty")
        self._write(_CANVAS_DOMAIN_USERNAME, domain)
        self._write(_CANVAS_TOKEN_USERNAME, token)

    def delete_canvas_credentials(self) -> None:
        self._delete(_CANVAS_DOMAIN_USERNAME)
        self._delete(_CANVAS_TOKEN_USERNAME)

    def set_key(self, provider: LLMServiceProvider, api_key: str) -> None:
        """Persist API key for provider."""
        normalized = api_key.strip()
        if not normalized:
            raise ValueError("api_key must not be empty")
        self._write(self._llm_username(provider), normalized)

    def get_key(self, provider: LLMServiceProvider) -> str | None:
        """Load provider API key or return None."""
        return self._read(self._llm_username(provider))

    def delete_key(self, provider: LLMServiceProvider) -> None:
        """Delete provider key; no-op if key is already absent."""
        self._delete(self._llm_username(provider))

    def _read(self, username: str) -> str | None:
        try:
            secret = keyring.get_password(self._service_name, username)
        except KeyringError as exc:
            raise KeyringStoreError(f"Failed to read secret {username}.") from exc
        return secret if secret else None

    def _write(self, username: str, secret: str) -> None:
        try:
            keyring.set_password(self._service_name, username, secret)
        except KeyringError as exc:
            raise KeyringStoreError(f"Failed to persist secret {username}.") from exc

    def _delete(self, username: str) -> None:
        try:
            keyring.delete_password(self._service_name, username)
        except PasswordDeleteError:
            return
        except KeyringError as exc:
            raise KeyringStoreError(f"Failed to delete secret {username}.") from exc

    @staticmethod
    def _llm_username(provider: LLMServiceProvider) -> str:
        return f"llm:{provider.value}"
