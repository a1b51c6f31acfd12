# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class InFlightTracker:
    """WSGI middleware counting requests that are still being handled.

    The count drops once the wrapped app has returned its response, which
    is after the request's store operation has committed.
    """

    def __init__(self, app: WSGIApp) -> None:
        self._app = app
        self._count = 0
        self._idle = threading.Condition()

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        with self._idle:
            self._count += 1
        try:
            return self._app(environ, start_response)
        finally:
            with self._idle:
                self._count -= 1
                if self._count == 0:
                    self._idle.notify_all()

    @property
    def in_flight(self) -> int:
        with self._idle:
            return self._count

    def wait_idle(self, timeout: float) -> bool:
        """Block until no request is in flight; False if ``timeout`` ran out."""
        deadline = time.monotonic() + timeout
        with self._idle:
            while self._count > 0:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._idle.wait(remaining)
            return True


__all__ = ["InFlightTracker"]
