# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database handle and engine helpers."""

from __future__ import annotations

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from treasury.shared.config import DatabaseConfig
from treasury.shared.logging import logger


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _set_sqlite_pragmas(dbapi_conn, _) -> None:
    """Apply safety PRAGMAs when using SQLite."""

    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA busy_timeout=30000;")
    finally:
        cur.close()


class Database:
    """The single logical handle on the persistent store.

    Opened once at startup with :meth:`open` and closed once at shutdown
    with :meth:`close`. Callers never share sessions; each unit of work gets
    a fresh one from :attr:`session_factory`.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
        )
        self._closed = False

    @classmethod
    def open(cls, config: DatabaseConfig) -> Database:
        connect_args: dict[str, object] = {}
        if _is_sqlite(config.url):
            connect_args = {
                "check_same_thread": False,
                "timeout": int(config.pool_timeout),
            }

        engine = create_engine(
            config.url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        if _is_sqlite(config.url):
            event.listen(engine, "connect", _set_sqlite_pragmas)

        database = cls(engine)
        database.init_schema()
        logger.info(f"db.open: opened {engine.url.render_as_string(hide_password=True)}")
        return database

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def closed(self) -> bool:
        return self._closed

    def session_factory(self) -> Session:
        if self._closed:
            raise RuntimeError("database is closed")
        return self._session_factory()

    def init_schema(self) -> None:
        # Import registers the mapped tables on Base.metadata.
        from treasury.infrastructure.db import models  # noqa: F401

        Base.metadata.create_all(bind=self._engine)
        logger.info("Database schema ensured")

    def check(self) -> bool:
        with self._engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        if self._closed:
            raise RuntimeError("database already closed")
        self._engine.dispose()
        self._closed = True
        logger.info("db.close: engine disposed")


__all__ = ["Base", "Database"]
