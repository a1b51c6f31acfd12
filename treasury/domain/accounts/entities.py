# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ClaimCodeStatus(str, Enum):
    UNUSED = "unused"
    REDEEMED = "redeemed"


def normalize_login(login: str) -> str:
    return login.strip().lower()


@dataclass(slots=True, frozen=True)
class Account:

    id: int
    login: str
    client_salt: str
    password_hash: str
    quota_bytes: int
    created_at: datetime


@dataclass(slots=True, frozen=True)
class ClaimCode:

    code: str
    status: ClaimCodeStatus
    created_at: datetime
    expires_at: datetime | None = None
    redeemed_at: datetime | None = None
    account_id: int | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def is_redeemable(self, now: datetime) -> bool:
        return self.status is ClaimCodeStatus.UNUSED and not self.is_expired(now)


@dataclass(slots=True, frozen=True)
class CookiePolicy:
    """Attributes the HTTP adapter puts on the session cookie."""

    secure: bool
    same_site: str
    http_only: bool
    max_age_seconds: int


@dataclass(slots=True, frozen=True)
class SessionInfo:

    token: str
    account_id: int
    login: str
    created_at: datetime
    last_activity_at: datetime


@dataclass(slots=True, frozen=True)
class SessionGrant:

    token: str
    account_id: int
    login: str
    cookie: CookiePolicy
