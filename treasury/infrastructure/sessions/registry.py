# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

from treasury.domain.accounts.entities import CookiePolicy, SessionInfo
from treasury.shared.config import SecurityConfig
from treasury.shared.logging import logger

TOKEN_BYTES = 48

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True)
class _SessionRecord:
    account_id: int
    login: str
    created_at: datetime
    last_activity_at: datetime


class SessionRegistry:
    """Live sessions keyed by their opaque token.

    Sessions live in process memory only. Expiry is checked lazily on every
    access and swept periodically by :meth:`sweep_expired`; a session dies
    when it has been idle longer than ``idle_timeout`` or, if configured,
    when it is older than ``absolute_timeout``.
    """

    def __init__(
        self,
        *,
        idle_timeout: timedelta,
        absolute_timeout: timedelta | None = None,
        cookie_policy: CookiePolicy,
        clock: Clock = _utcnow,
    ) -> None:
        self._idle_timeout = idle_timeout
        self._absolute_timeout = absolute_timeout
        self._cookie_policy = cookie_policy
        self._clock = clock
        self._sessions: dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, security: SecurityConfig, *, clock: Clock = _utcnow) -> SessionRegistry:
        absolute = security.session_absolute_timeout
        return cls(
            idle_timeout=timedelta(seconds=security.session_idle_timeout),
            absolute_timeout=timedelta(seconds=absolute) if absolute else None,
            cookie_policy=CookiePolicy(
                secure=security.cookie_secure,
                same_site=security.cookie_samesite,
                http_only=True,
                max_age_seconds=int(security.session_idle_timeout),
            ),
            clock=clock,
        )

    @property
    def cookie_policy(self) -> CookiePolicy:
        return self._cookie_policy

    def issue(self, account_id: int, login: str) -> str:
        now = self._clock()
        record = _SessionRecord(
            account_id=account_id, login=login, created_at=now, last_activity_at=now
        )
        with self._lock:
            token = secrets.token_urlsafe(TOKEN_BYTES)
            while token in self._sessions:
                token = secrets.token_urlsafe(TOKEN_BYTES)
            self._sessions[token] = record
        logger.debug(f"sessions.issue: account={account_id} tok={token[:6]}…")
        return token

    def resolve(self, token: str) -> SessionInfo | None:
        """Return the live session for ``token`` and mark it active now."""
        if not token:
            return None
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            now = self._clock()
            if self._is_expired(record, now):
                del self._sessions[token]
                logger.debug(f"sessions.expire: account={record.account_id}")
                return None
            refreshed = replace(record, last_activity_at=now)
            self._sessions[token] = refreshed
        return SessionInfo(
            token=token,
            account_id=refreshed.account_id,
            login=refreshed.login,
            created_at=refreshed.created_at,
            last_activity_at=refreshed.last_activity_at,
        )

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def revoke_account(self, account_id: int) -> int:
        with self._lock:
            doomed = [t for t, r in self._sessions.items() if r.account_id == account_id]
            for token in doomed:
                del self._sessions[token]
        return len(doomed)

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            doomed = [t for t, r in self._sessions.items() if self._is_expired(r, now)]
            for token in doomed:
                del self._sessions[token]
        if doomed:
            logger.info(f"sessions.sweep: removed {len(doomed)} expired sessions")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info(f"sessions.clear: dropped {count} sessions")

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _is_expired(self, record: _SessionRecord, now: datetime) -> bool:
        if now - record.last_activity_at > self._idle_timeout:
            return True
        if self._absolute_timeout is not None and now - record.created_at > self._absolute_timeout:
            return True
        return False


class SessionSweeper:
    """Background thread calling :meth:`SessionRegistry.sweep_expired`."""

    def __init__(self, registry: SessionRegistry, *, interval: float) -> None:
        self._registry = registry
        self._interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True, name="SessionSweeper")

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=2.0)

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._registry.sweep_expired()
            except Exception:
                logger.exception("sessions.sweep: failed")
