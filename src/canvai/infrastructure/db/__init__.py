"""Database infrastructure package."""

from canvai.infrastructure.db.key_value_store import SqlAlchemyKeyValueStore
from canvai.infrastructure.db.session import (
    create_session_factory,
    create_sqlite_engine,
    make_sqlite_url,
)

__all__ = [
    "SqlAlchemyKeyValueStore",
    "create_session_factory",
    "create_sqlite_engine",
    "make_sqlite_url",
]
