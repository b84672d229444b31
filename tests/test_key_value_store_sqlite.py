"""SQLite tests for the persisted key-value store and dashboard cache."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

from canvai.application.dashboard_cache import DASHBOARD_CACHE_KEY, DashboardCache
from canvai.domain.canvas import DashboardSnapshot, Term
from canvai.infrastructure.db import (
    SqlAlchemyKeyValueStore,
    create_session_factory,
    create_sqlite_engine,
    make_sqlite_url,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


class StaticSource:
    def __init__(self) -> None:
        self.calls = 0

    async def aggregate(self) -> DashboardSnapshot:
        self.calls += 1
        return DashboardSnapshot(
            courses=[],
            current_term=Term(id=2, name="Spring 25"),
            assignments=[],
            announcements=[],
            last_fetched=NOW,
        )


def test_make_sqlite_url_uses_posix_path() -> None:
    assert make_sqlite_url(Path("data") / "canvai.db") == "sqlite:///data/canvai.db"


def test_key_value_store_set_get_replace_remove() -> None:
    db_path = Path("tests") / f"_runtime_kv_roundtrip_{uuid4().hex}.db"
    engine = create_sqlite_engine(db_path)
    try:
        store = SqlAlchemyKeyValueStore(create_session_factory(engine), now=lambda: NOW)

        assert store.get("missing") is None
        store.set("k", "v1")
        store.set("k", "v2")
        assert store.get("k") == "v2"

        store.remove("k")
        store.remove("k")
        assert store.get("k") is None
    finally:
        engine.dispose()
        db_path.unlink(missing_ok=True)


def test_dashboard_snapshot_survives_restart() -> None:
    db_path = Path("tests") / f"_runtime_dashboard_restart_{uuid4().hex}.db"
    engine = create_sqlite_engine(db_path)
    try:
        first_source = StaticSource()
        first_cache = DashboardCache(
            first_source,
            SqlAlchemyKeyValueStore(create_session_factory(engine)),
            now=lambda: NOW,
        )
        asyncio.run(first_cache.get())
        engine.dispose()

        engine = create_sqlite_engine(db_path)
        store = SqlAlchemyKeyValueStore(create_session_factory(engine))
        second_source = StaticSource()
        second_cache = DashboardCache(
            second_source,
            store,
            now=lambda: NOW + timedelta(minutes=5),
        )
        snapshot = asyncio.run(second_cache.get())

        assert second_source.calls == 0
        assert snapshot.current_term == Term(id=2, name="Spring 25")
        assert snapshot.last_fetched == NOW
        assert store.get(DASHBOARD_CACHE_KEY) is not None
    finally:
        engine.dispose()
        db_path.unlink(missing_ok=True)
