# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .entities import EntryKind, FilesystemEntry


class EntryRepository(Protocol):
    """Filesystem entries, always scoped to one owning account."""

    def get(self, account_id: int, entry_id: str) -> FilesystemEntry | None: ...
    def list_children(
        self, account_id: int, parent_id: str | None
    ) -> Sequence[FilesystemEntry]: ...
    def name_exists(self, account_id: int, parent_id: str | None, name: str) -> bool: ...
    def add(
        self,
        *,
        account_id: int,
        parent_id: str | None,
        name: str,
        kind: EntryKind,
        size_bytes: int = 0,
    ) -> FilesystemEntry: ...
    def used_bytes(self, account_id: int) -> int: ...
    def delete_subtree(self, account_id: int, entry_id: str) -> int: ...
