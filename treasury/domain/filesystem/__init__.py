# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import EntryKind, FilesystemEntry, StorageUsage, validate_entry_name
from .exceptions import (
    EntryNotFoundError,
    FolderNotFoundError,
    InvalidEntryNameError,
    NameConflictError,
    ParentNotFoundError,
    QuotaExceededError,
)
from .repositories import EntryRepository

__all__ = [
    "EntryKind",
    "EntryNotFoundError",
    "EntryRepository",
    "FilesystemEntry",
    "FolderNotFoundError",
    "InvalidEntryNameError",
    "NameConflictError",
    "ParentNotFoundError",
    "QuotaExceededError",
    "StorageUsage",
    "validate_entry_name",
]
