# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from treasury.domain.filesystem.entities import EntryKind
from treasury.domain.filesystem.entities import FilesystemEntry as DomainEntry
from treasury.domain.filesystem.exceptions import NameConflictError
from treasury.domain.filesystem.repositories import EntryRepository
from treasury.infrastructure.db.models import FilesystemEntry
from treasury.infrastructure.repositories.accounts.sqlalchemy_account_repository import as_utc

ENTRY_ID_BYTES = 16


def _to_entry(row: FilesystemEntry) -> DomainEntry:
    return DomainEntry(
        id=row.id,
        account_id=row.account_id,
        parent_id=row.parent_id,
        name=row.name,
        kind=EntryKind(row.kind),
        size_bytes=int(row.size_bytes or 0),
        created_at=as_utc(row.created_at) or datetime.now(UTC),
    )


def _parent_clause(parent_id: str | None):
    if parent_id is None:
        return FilesystemEntry.parent_id.is_(None)
    return FilesystemEntry.parent_id == parent_id


class SqlAlchemyEntryRepository(EntryRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, account_id: int, entry_id: str) -> DomainEntry | None:
        row = self._session.scalars(
            select(FilesystemEntry).where(
                FilesystemEntry.id == entry_id,
                FilesystemEntry.account_id == account_id,
            )
        ).first()
        return _to_entry(row) if row else None

    def list_children(self, account_id: int, parent_id: str | None) -> Sequence[DomainEntry]:
        rows = self._session.scalars(
            select(FilesystemEntry).where(
                FilesystemEntry.account_id == account_id,
                _parent_clause(parent_id),
            )
        ).all()
        return sorted((_to_entry(row) for row in rows), key=DomainEntry.sort_key)

    def name_exists(self, account_id: int, parent_id: str | None, name: str) -> bool:
        found = self._session.scalar(
            select(FilesystemEntry.id)
            .where(
                FilesystemEntry.account_id == account_id,
                _parent_clause(parent_id),
                FilesystemEntry.name == name,
            )
            .limit(1)
        )
        return found is not None

    def add(
        self,
        *,
        account_id: int,
        parent_id: str | None,
        name: str,
        kind: EntryKind,
        size_bytes: int = 0,
    ) -> DomainEntry:
        row = FilesystemEntry(
            id=secrets.token_hex(ENTRY_ID_BYTES),
            account_id=account_id,
            parent_id=parent_id,
            name=name,
            kind=kind.value,
            size_bytes=size_bytes,
            created_at=datetime.now(UTC),
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise NameConflictError(context={"name": name}) from exc
        return _to_entry(row)

    def used_bytes(self, account_id: int) -> int:
        total = self._session.scalar(
            select(func.coalesce(func.sum(FilesystemEntry.size_bytes), 0)).where(
                FilesystemEntry.account_id == account_id,
                FilesystemEntry.kind == EntryKind.FILE.value,
            )
        )
        return int(total or 0)

    def delete_subtree(self, account_id: int, entry_id: str) -> int:
        doomed = [entry_id]
        frontier = [entry_id]
        while frontier:
            children = self._session.scalars(
                select(FilesystemEntry.id).where(
                    FilesystemEntry.account_id == account_id,
                    FilesystemEntry.parent_id.in_(frontier),
                )
            ).all()
            frontier = list(children)
            doomed.extend(frontier)

        # Cascaded child deletes are not reflected in rowcount, so count the walk.
        self._session.execute(
            delete(FilesystemEntry)
            .where(
                FilesystemEntry.account_id == account_id,
                FilesystemEntry.id.in_(doomed),
            )
            .execution_options(synchronize_session=False)
        )
        return len(doomed)
