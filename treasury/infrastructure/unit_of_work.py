# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""One SQLAlchemy session per logical operation."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from treasury.domain.store import UnitOfWork
from treasury.infrastructure.repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyClaimCodeRepository,
    SqlAlchemyEntryRepository,
)
from treasury.shared.logging import logger


@dataclass
class SqlAlchemyUnitOfWork(AbstractContextManager, UnitOfWork):
    """Repositories bound to one session.

    Commits when the block exits cleanly and rolls back otherwise, so a
    logical operation is never half applied.
    """

    session_factory: Callable[[], Session]
    _session: Session | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise RuntimeError("unit of work is already open")
        session = self.session_factory()
        self.accounts = SqlAlchemyAccountRepository(session)
        self.claim_codes = SqlAlchemyClaimCodeRepository(session)
        self.entries = SqlAlchemyEntryRepository(session)
        self._session = session
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        session, self._session = self._session, None
        assert session is not None
        with session:
            if exc_type is not None:
                logger.debug(f"uow: rolling back after {exc_type.__name__}")
                session.rollback()
                return
            try:
                session.commit()
            except Exception:
                logger.exception("uow: commit failed")
                session.rollback()
                raise


__all__ = ["SqlAlchemyUnitOfWork"]
