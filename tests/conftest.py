"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import keyring
import pytest


@pytest.fixture
def memory_keyring(monkeypatch: pytest.MonkeyPatch) -> Iterator[dict[tuple[str, str], str]]:
    """Replace the OS keyring backend with an in-memory dict."""
    memory: dict[tuple[str, str], str] = {}

    def fake_set_password(service: str, username: str, password: str) -> None:
        memory[(service, username)] = password

    def fake_get_password(service: str, username: str) -> str | None:
        return memory.get((service, username))

    def fake_delete_password(service: str, username: str) -> None:
        memory.pop((service, username), None)

    monkeypatch.setattr(keyring, "set_password", fake_set_password)
    monkeypatch.setattr(keyring, "get_password", fake_get_password)
    monkeypatch.setattr(keyring, "delete_password", fake_delete_password)
    yield memory
