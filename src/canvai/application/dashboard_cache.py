"""Read-through cache for dashboard snapshots with a persisted copy."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from pydantic import ValidationError

from canvai.domain.canvas import DashboardSnapshot

LOGGER = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = "canvai.dashboard"
DEFAULT_CACHE_TTL = timedelta(minutes=15)


class KeyValueStore(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> str | None:
        """Return stored value or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Insert or replace value."""
        ...

    def remove(self, key: str) -> None:
        """Delete value; no-op when absent."""
        ...


class DashboardSource(Protocol):
    """Producer of fresh dashboard snapshots."""

    async def aggregate(self) -> DashboardSnapshot:
        ...


class DashboardCache:
    """Serve snapshots younger than ``ttl`` without calling the aggregator.

    Snapshots are replaced wholesale. A failed refresh leaves both the
    in-memory and the persisted snapshot untouched.
    """

    def __init__(
        self,
        source: DashboardSource,
        store: KeyValueStore,
        *,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        key: str = DASHBOARD_CACHE_KEY,
        now: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        self._source = source
        self._store = store
        self._ttl = ttl
        self._key = key
        self._now = now
        self._snapshot: DashboardSnapshot | None = None
        self._hydrated = False

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def get(self) -> DashboardSnapshot:
        """Return a fresh cached snapshot or aggregate a new one."""
        if not self._hydrated:
            self._snapshot = self._hydrate()
            self._hydrated = True

        snapshot = self._snapshot
        if snapshot is not None and self._is_fresh(snapshot):
            LOGGER.debug("event=dashboard_cache_hit last_fetched=%s", snapshot.last_fetched)
            return snapshot
        return await self.refresh()

    async def refresh(self) -> DashboardSnapshot:
        """Aggregate unconditionally and replace the cached snapshot."""
        snapshot = await self._source.aggregate()
        self._store.set(self._key, snapshot.model_dump_json())
        self._snapshot = snapshot
        self._hydrated = True
        LOGGER.info("event=dashboard_cache_refreshed last_fetched=%s", snapshot.last_fetched)
        return snapshot

    def clear(self) -> None:
        """Evict in-memory and persisted snapshots."""
        self._snapshot = None
        self._hydrated = True
        self._store.remove(self._key)
        LOGGER.info("event=dashboard_cache_cleared")

    def _hydrate(self) -> DashboardSnapshot | None:
        raw = self._store.get(self._key)
        if raw is None:
            return None

        try:
            snapshot = DashboardSnapshot.model_validate_json(raw)
        except ValidationError:
            LOGGER.warning("event=dashboard_cache_discarded reason=invalid_payload")
            self._store.remove(self._key)
            return None

        if not self._is_fresh(snapshot):
            LOGGER.info(
                "event=dashboard_cache_discarded reason=stale last_fetched=%s",
                snapshot.last_fetched,
            )
            self._store.remove(self._key)
            return None
        return snapshot

    def _is_fresh(self, snapshot: DashboardSnapshot) -> bool:
        age = self._now() - snapshot.last_fetched
        return timedelta(0) <= age < self._ttl
