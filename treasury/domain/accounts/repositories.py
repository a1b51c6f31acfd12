# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import Account, ClaimCode


class AccountRepository(Protocol):
    def find_by_login(self, login: str) -> Account | None: ...
    def find_by_id(self, account_id: int) -> Account | None: ...
    def add(
        self, *, login: str, client_salt: str, password_hash: str, quota_bytes: int
    ) -> Account: ...


class ClaimCodeRepository(Protocol):
    def get(self, code: str) -> ClaimCode | None: ...
    def add(self, code: str, *, expires_at: datetime | None = None) -> ClaimCode: ...
    def mark_redeemed(self, code: str, *, account_id: int, redeemed_at: datetime) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, proof: str) -> str: ...
    def verify(self, proof: str, hashed: str) -> bool: ...
