# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus

from flask import request

from treasury.shared.config import SecurityConfig
from treasury.shared.errors import DomainError
from treasury.shared.logging import logger

from .request_logger import client_address


class RateLimitedError(DomainError):
    code = "rate_limited"
    status = HTTPStatus.TOO_MANY_REQUESTS


class SlidingWindowLimiter:
    """At most ``limit`` hits per key within any ``window_seconds`` span.

    Keys idle for a whole window are dropped, at most once per window, from
    inside :meth:`hit`, so memory tracks recently active clients only.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def hit(self, key: str) -> float:
        """Record a hit; returns 0 if allowed, else seconds until a slot frees."""
        now = self._clock()
        with self._lock:
            if now - self._last_prune >= self._window:
                self._prune_locked(now)
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self._window:
                hits.popleft()
            if len(hits) >= self._limit:
                return self._window - (now - hits[0])
            hits.append(now)
            return 0.0

    def prune(self) -> int:
        """Forget keys with no hit inside the window."""
        with self._lock:
            return self._prune_locked(self._clock())

    def _prune_locked(self, now: float) -> int:
        idle = [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= self._window]
        for key in idle:
            del self._hits[key]
        self._last_prune = now
        return len(idle)


def rate_limit(
    security: SecurityConfig,
    *,
    limit: int | None = None,
    window_seconds: float | None = None,
):
    """Per-client limit for one view; disabled when ``ENABLE_RATE_LIMIT`` is off."""
    limiter = SlidingWindowLimiter(
        limit or security.rate_limit_requests,
        window_seconds or security.rate_limit_window,
    )

    def decorator(f: Callable):
        if not security.enable_rate_limit:
            return f

        @wraps(f)
        def wrapper(*args, **kwargs):
            client = client_address()
            retry_after = limiter.hit(f"{request.path}:{client}")
            if retry_after:
                logger.warning(f"rate_limit: {request.path} throttled for {client}")
                raise RateLimitedError(context={"retry_after": math.ceil(retry_after)})
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["RateLimitedError", "SlidingWindowLimiter", "rate_limit"]
