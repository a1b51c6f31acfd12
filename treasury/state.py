# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Shared service state and the exclusion boundary around the store."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError

from treasury.infrastructure.db import Database
from treasury.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from treasury.shared.config import AppConfig
from treasury.shared.errors import StoreUnavailableError
from treasury.shared.logging import logger


class ServiceState:
    """Owns the live config and the database handle.

    Every request-path operation enters :meth:`unit_of_work`, which holds the
    boundary for exactly one logical operation. :meth:`close_database` is
    the only way the handle is closed; it waits for the current holder to
    leave and can run only once.
    """

    def __init__(self, config: AppConfig, database: Database) -> None:
        self._config = config
        self._database: Database | None = database
        self._lock = threading.Lock()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def is_open(self) -> bool:
        return self._database is not None

    @contextmanager
    def unit_of_work(self) -> Iterator[SqlAlchemyUnitOfWork]:
        with self._lock:
            if self._database is None:
                logger.warning("state.uow: store already closed")
                raise StoreUnavailableError()
            try:
                with SqlAlchemyUnitOfWork(self._database.session_factory) as uow:
                    yield uow
            except IntegrityError:
                raise
            except DBAPIError as exc:
                logger.exception(f"state.uow: store failure {type(exc).__name__}")
                raise StoreUnavailableError() from exc

    def check_database(self) -> bool:
        with self._lock:
            if self._database is None:
                raise StoreUnavailableError()
            return self._database.check()

    def close_database(self) -> None:
        with self._lock:
            if self._database is None:
                raise RuntimeError("database already closed")
            database, self._database = self._database, None
            database.close()
        logger.info("state.close: database closed")


__all__ = ["ServiceState"]
