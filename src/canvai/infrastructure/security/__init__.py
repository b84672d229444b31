"""Security infrastructure package."""

from canvai.infrastructure.security.keyring_store import (
    KeyringCredentialStore,
    KeyringStoreError,
)

__all__ = ["KeyringCredentialStore", "KeyringStoreError"]
