"""SQLAlchemy engine and the transaction boundary.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. Every ordering operation runs inside exactly one
``transaction()`` block; nothing partial is ever committed.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from kanban_order.config import load_config

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return os.getenv("TEST_DATABASE_URL") or load_config().database.dsn


def _begin_immediate_on_sqlite(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock at BEGIN.

    pysqlite otherwise defers BEGIN until the first DML statement, which
    leaves the position reads at the start of an operation outside its
    transaction. With BEGIN IMMEDIATE, operations on the same database file
    run one after another.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# Module-level cached Engine shared by all repositories
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    The engine is rebuilt when the resolved URL changes, which lets tests
    point the process at a fresh database. For SQLite in-memory URLs, use a
    StaticPool so every connection sees the same database.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        is_sqlite = resolved_url.startswith("sqlite")
        if is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        kwargs["echo"] = load_config().database.echo
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        if is_sqlite:
            _begin_immediate_on_sqlite(_ENGINE)
        _ENGINE_URL = resolved_url
        logger.info("db.engine.created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


def reset_engine() -> None:
    """Dispose the cached engine so the next call builds a new one."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


@contextmanager
def transaction(engine: Engine | None = None) -> Iterator[Connection]:
    """Yield a connection inside one atomic transaction.

    Commits when the block exits normally. Any exception rolls the whole
    transaction back and is re-raised to the caller unchanged.
    """
    eng = engine or get_engine()
    try:
        with eng.begin() as conn:
            yield conn
    except Exception:
        logger.error("db.transaction.rolled_back", exc_info=True)
        raise


__all__ = ["get_engine", "reset_engine", "transaction"]
