# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Serving loop and graceful shutdown."""

from __future__ import annotations

import threading
from typing import Protocol

from treasury.infrastructure.sessions import SessionRegistry, SessionSweeper
from treasury.interfaces.http.inflight import InFlightTracker
from treasury.shared.logging import logger
from treasury.state import ServiceState


class AcceptLoop(Protocol):
    def serve_forever(self) -> None: ...
    def shutdown(self) -> None: ...
    def server_close(self) -> None: ...


class ShutdownCoordinator:
    """Owns the accept loop and is the only caller of ``close_database``.

    Shutdown is requested by setting an event (operator shell, signal
    handler). :meth:`run` then lets the accept loop return, waits up to
    ``grace_period`` seconds for in-flight requests, drops all sessions and
    closes the store. The close happens after ``serve_forever`` has
    returned and only once the store boundary is free.
    """

    def __init__(
        self,
        *,
        state: ServiceState,
        sessions: SessionRegistry,
        server: AcceptLoop,
        tracker: InFlightTracker,
        grace_period: float,
        sweep_interval: float | None = None,
    ) -> None:
        self._state = state
        self._sessions = sessions
        self._server = server
        self._tracker = tracker
        self._grace_period = grace_period
        self._sweeper = (
            SessionSweeper(sessions, interval=sweep_interval) if sweep_interval else None
        )
        self._shutdown_requested = threading.Event()
        self._started = False
        self._start_guard = threading.Lock()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested.is_set()

    def request_shutdown(self, reason: str = "operator") -> None:
        if not self._shutdown_requested.is_set():
            logger.info(f"shutdown: requested by {reason}")
        self._shutdown_requested.set()

    def run(self) -> None:
        with self._start_guard:
            if self._started:
                raise RuntimeError("ShutdownCoordinator.run() called twice")
            self._started = True

        watcher = threading.Thread(target=self._watch, daemon=True, name="ShutdownWatcher")
        watcher.start()
        if self._sweeper is not None:
            self._sweeper.start()

        try:
            self._server.serve_forever()
        finally:
            self._shutdown_requested.set()
            self._server.server_close()
            if self._sweeper is not None:
                self._sweeper.stop()
            logger.info("shutdown: accept loop stopped")

        self._drain_and_close()

    def _watch(self) -> None:
        self._shutdown_requested.wait()
        self._server.shutdown()

    def _drain_and_close(self) -> None:
        in_flight = self._tracker.in_flight
        if in_flight:
            logger.info(f"shutdown: waiting for {in_flight} in-flight requests")
        if not self._tracker.wait_idle(self._grace_period):
            logger.warning(
                f"shutdown: grace period of {self._grace_period}s elapsed with "
                f"{self._tracker.in_flight} requests in flight"
            )

        self._sessions.clear()
        # Blocks until whoever holds the store boundary releases it.
        self._state.close_database()
        logger.info("shutdown: complete")


__all__ = ["AcceptLoop", "ShutdownCoordinator"]
