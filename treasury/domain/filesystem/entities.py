# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .exceptions import InvalidEntryNameError

_RESERVED_NAMES = frozenset({".", ".."})


class EntryKind(str, Enum):
    FOLDER = "folder"
    FILE = "file"


@dataclass(slots=True, frozen=True)
class FilesystemEntry:

    id: str
    account_id: int
    parent_id: str | None
    name: str
    kind: EntryKind
    size_bytes: int
    created_at: datetime

    @property
    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER

    def sort_key(self) -> tuple[str, str, str]:
        return (self.name.casefold(), self.name, self.id)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "name": self.name,
            "kind": self.kind.value,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class StorageUsage:

    used_bytes: int
    quota_bytes: int

    @property
    def available_bytes(self) -> int:
        return max(0, self.quota_bytes - self.used_bytes)

    def has_space_for(self, size_bytes: int) -> bool:
        return self.used_bytes + size_bytes <= self.quota_bytes


def validate_entry_name(name: str, *, max_length: int) -> str:
    """Return ``name`` if it is usable as a sibling name, else raise.

    Names are kept exactly as given (no trimming or case folding), so two
    siblings may differ only in case.
    """
    if not name or not name.strip():
        raise InvalidEntryNameError(context={"reason": "empty"})
    if name in _RESERVED_NAMES:
        raise InvalidEntryNameError(context={"reason": "reserved"})
    if len(name) > max_length:
        raise InvalidEntryNameError(context={"reason": "too_long", "max_length": max_length})
    if "/" in name or "\\" in name:
        raise InvalidEntryNameError(context={"reason": "separator"})
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in name):
        raise InvalidEntryNameError(context={"reason": "control_character"})
    return name
