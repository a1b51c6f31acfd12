# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from treasury.shared.errors.base import CapacityError, ConflictError, DomainError, NotFoundError


class FolderNotFoundError(NotFoundError):
    code = "folder_not_found"


class ParentNotFoundError(NotFoundError):
    code = "parent_not_found"


class EntryNotFoundError(NotFoundError):
    code = "entry_not_found"


class NameConflictError(ConflictError):
    code = "name_conflict"


class InvalidEntryNameError(DomainError):
    code = "invalid_entry_name"
    status = HTTPStatus.BAD_REQUEST


class QuotaExceededError(CapacityError):
    code = "quota_exceeded"

    def __init__(self, *, quota_bytes: int, used_bytes: int, required_bytes: int) -> None:
        context: Mapping[str, Any] = {
            "quota_bytes": quota_bytes,
            "used_bytes": used_bytes,
            "required_bytes": required_bytes,
        }
        super().__init__(context=context)
