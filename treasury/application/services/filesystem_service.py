# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from treasury.domain.accounts.exceptions import UnauthenticatedError
from treasury.domain.filesystem.entities import (
    EntryKind,
    FilesystemEntry,
    StorageUsage,
    validate_entry_name,
)
from treasury.domain.filesystem.exceptions import (
    EntryNotFoundError,
    FolderNotFoundError,
    NameConflictError,
    ParentNotFoundError,
    QuotaExceededError,
)
from treasury.domain.store import TransactionalStore, UnitOfWork
from treasury.shared.config import StorageConfig
from treasury.shared.errors import ValidationError
from treasury.shared.logging import logger


class FilesystemService:
    """Per-account filesystem metadata.

    Every lookup is scoped by ``account_id``; an id that belongs to another
    account behaves exactly like one that does not exist.
    """

    def __init__(self, *, store: TransactionalStore, storage: StorageConfig) -> None:
        self._store = store
        self._max_name_length = storage.max_entry_name_length

    def get_storage_used(self, account_id: int) -> StorageUsage:
        with self._store.unit_of_work() as uow:
            return self._usage(uow, account_id)

    def get_filesystem(self, account_id: int, folder_id: str | None = None) -> list[FilesystemEntry]:
        with self._store.unit_of_work() as uow:
            if folder_id is not None:
                folder = uow.entries.get(account_id, folder_id)
                if folder is None or not folder.is_folder:
                    raise FolderNotFoundError()
            return list(uow.entries.list_children(account_id, folder_id))

    def create_folder(self, account_id: int, parent_id: str | None, name: str) -> FilesystemEntry:
        name = validate_entry_name(name, max_length=self._max_name_length)
        with self._store.unit_of_work() as uow:
            self._require_free_name(uow, account_id, parent_id, name)
            entry = uow.entries.add(
                account_id=account_id,
                parent_id=parent_id,
                name=name,
                kind=EntryKind.FOLDER,
            )
        logger.info(f"fs.create_folder: account={account_id} entry={entry.id}")
        return entry

    def add_file(
        self, account_id: int, parent_id: str | None, name: str, size_bytes: int
    ) -> FilesystemEntry:
        """Register a file placeholder once its content has been stored."""
        if size_bytes < 0:
            raise ValidationError(context={"fields": ["size_bytes"]})
        name = validate_entry_name(name, max_length=self._max_name_length)
        with self._store.unit_of_work() as uow:
            self._require_free_name(uow, account_id, parent_id, name)
            usage = self._usage(uow, account_id)
            if not usage.has_space_for(size_bytes):
                logger.warning(
                    f"fs.add_file: quota exceeded account={account_id} "
                    f"need={size_bytes} available={usage.available_bytes}"
                )
                raise QuotaExceededError(
                    quota_bytes=usage.quota_bytes,
                    used_bytes=usage.used_bytes,
                    required_bytes=size_bytes,
                )
            entry = uow.entries.add(
                account_id=account_id,
                parent_id=parent_id,
                name=name,
                kind=EntryKind.FILE,
                size_bytes=size_bytes,
            )
        logger.info(f"fs.add_file: account={account_id} entry={entry.id} size={size_bytes}")
        return entry

    def delete_entry(self, account_id: int, entry_id: str) -> int:
        with self._store.unit_of_work() as uow:
            if uow.entries.get(account_id, entry_id) is None:
                raise EntryNotFoundError()
            removed = uow.entries.delete_subtree(account_id, entry_id)
        logger.info(f"fs.delete: account={account_id} entry={entry_id} removed={removed}")
        return removed

    def _usage(self, uow: UnitOfWork, account_id: int) -> StorageUsage:
        account = uow.accounts.find_by_id(account_id)
        if account is None:
            raise UnauthenticatedError()
        return StorageUsage(
            used_bytes=uow.entries.used_bytes(account_id),
            quota_bytes=account.quota_bytes,
        )

    def _require_free_name(
        self, uow: UnitOfWork, account_id: int, parent_id: str | None, name: str
    ) -> None:
        if parent_id is not None:
            parent = uow.entries.get(account_id, parent_id)
            if parent is None or not parent.is_folder:
                raise ParentNotFoundError()
        if uow.entries.name_exists(account_id, parent_id, name):
            raise NameConflictError(context={"name": name})


__all__ = ["FilesystemService"]
