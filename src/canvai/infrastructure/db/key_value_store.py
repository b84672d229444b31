"""SQLite-backed key-value store used for the persisted dashboard cache."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from canvai.infrastructure.db.models import CacheEntryModel


class SqlAlchemyKeyValueStore:
    """Store string values in the ``cache_entries`` table, one transaction per call."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        now: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self._session_factory = session_factory
        self._now = now

    def get(self, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(CacheEntryModel, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory.begin() as session:
            entry = session.get(CacheEntryModel, key)
            if entry is None:
                session.add(CacheEntryModel(key=key, value=value, updated_at=self._now()))
            else:
                entry.value = value
                entry.updated_at = self._now()

    def remove(self, key: str) -> None:
        with self._session_factory.begin() as session:
            session.execute(delete(CacheEntryModel).where(CacheEntryModel.key == key))
