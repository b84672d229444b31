"""Process-local key-value store.

NOTE:
    Values vanish with the process. Used for tests and for running the
    dashboard without a database file.
"""

from __future__ import annotations


class InMemoryKeyValueStore:
    """Keep string values in a dict for the current process."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)
