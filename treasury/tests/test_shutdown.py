from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from treasury.application.services.account_service import AccountService
from treasury.application.services.filesystem_service import FilesystemService
from treasury.container import Container
from treasury.infrastructure.db import Database
from treasury.infrastructure.sessions import SessionRegistry
from treasury.interfaces.http.inflight import InFlightTracker
from treasury.server import ShutdownCoordinator
from treasury.shared.config import AppConfig
from treasury.shared.errors import StoreUnavailableError
from treasury.state import ServiceState


class FakeServer:
    """Accept loop stand-in that blocks until ``shutdown`` is called."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.serving = threading.Event()
        self._stopped = threading.Event()

    def serve_forever(self) -> None:
        self.calls.append("serve_forever")
        self.serving.set()
        self._stopped.wait(10)

    def shutdown(self) -> None:
        self.calls.append("shutdown")
        self._stopped.set()

    def server_close(self) -> None:
        self.calls.append("server_close")


def blocking_app(state: ServiceState, entered: threading.Event, release: threading.Event):
    def app(environ, start_response):
        with state.unit_of_work():
            entered.set()
            release.wait(10)
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [b"ok"]

    return app


class PausingStore:
    """Holds the store boundary open inside each unit of work until released."""

    def __init__(self, state: ServiceState) -> None:
        self._state = state
        self.entered = threading.Event()
        self.release = threading.Event()

    @contextmanager
    def unit_of_work(self) -> Iterator:
        with self._state.unit_of_work() as uow:
            self.entered.set()
            self.release.wait(10)
            yield uow


def idle_app(environ, start_response):
    start_response("200 OK", [])
    return [b""]


def make_coordinator(
    state: ServiceState,
    registry: SessionRegistry,
    tracker: InFlightTracker,
    *,
    grace_period: float = 5.0,
) -> tuple[ShutdownCoordinator, FakeServer]:
    server = FakeServer()
    coordinator = ShutdownCoordinator(
        state=state,
        sessions=registry,
        server=server,
        tracker=tracker,
        grace_period=grace_period,
    )
    return coordinator, server


def test_close_waits_for_current_unit_of_work(state: ServiceState) -> None:
    entered, release, closed = threading.Event(), threading.Event(), threading.Event()

    def hold() -> None:
        with state.unit_of_work():
            entered.set()
            release.wait(10)

    def close() -> None:
        state.close_database()
        closed.set()

    holder = threading.Thread(target=hold)
    holder.start()
    assert entered.wait(5)
    closer = threading.Thread(target=close)
    closer.start()

    assert not closed.wait(0.2)
    assert state.is_open

    release.set()
    assert closed.wait(5)
    holder.join(5)
    closer.join(5)
    assert not state.is_open


def test_close_happens_once_and_store_is_unavailable_afterwards(state: ServiceState) -> None:
    state.close_database()

    with pytest.raises(RuntimeError):
        state.close_database()
    with pytest.raises(StoreUnavailableError):
        with state.unit_of_work():
            pass
    with pytest.raises(StoreUnavailableError):
        state.check_database()


def test_inflight_tracker_counts_requests(state: ServiceState) -> None:
    entered, release = threading.Event(), threading.Event()
    tracker = InFlightTracker(blocking_app(state, entered, release))

    assert tracker.wait_idle(0.01) is True

    request = threading.Thread(target=tracker, args=({}, lambda *a: None))
    request.start()
    assert entered.wait(5)
    assert tracker.in_flight == 1
    assert tracker.wait_idle(0.05) is False

    release.set()
    assert tracker.wait_idle(5) is True
    request.join(5)
    assert tracker.in_flight == 0


def test_coordinator_shuts_down_cleanly(state: ServiceState, registry: SessionRegistry) -> None:
    registry.issue(1, "alice")
    coordinator, server = make_coordinator(state, registry, InFlightTracker(idle_app))

    runner = threading.Thread(target=coordinator.run)
    runner.start()
    assert server.serving.wait(5)
    coordinator.request_shutdown("test")
    runner.join(5)

    assert not runner.is_alive()
    assert server.calls == ["serve_forever", "shutdown", "server_close"]
    assert registry.active_count() == 0
    assert not state.is_open


def test_coordinator_drains_in_flight_request_before_closing(
    state: ServiceState, registry: SessionRegistry
) -> None:
    entered, release = threading.Event(), threading.Event()
    tracker = InFlightTracker(blocking_app(state, entered, release))
    coordinator, server = make_coordinator(state, registry, tracker)
    responses: list[bytes] = []

    runner = threading.Thread(target=coordinator.run)
    runner.start()
    request = threading.Thread(
        target=lambda: responses.extend(tracker({}, lambda *a: None))
    )
    request.start()
    assert entered.wait(5)

    coordinator.request_shutdown("test")
    runner.join(0.3)
    assert runner.is_alive()
    assert "server_close" in server.calls
    assert state.is_open

    release.set()
    request.join(5)
    runner.join(5)
    assert responses == [b"ok"]
    assert not runner.is_alive()
    assert not state.is_open


def test_requests_outliving_the_grace_period_see_store_unavailable(
    state: ServiceState, registry: SessionRegistry
) -> None:
    started, release = threading.Event(), threading.Event()
    outcome: list[str] = []

    def slow_app(environ, start_response):
        started.set()
        release.wait(10)
        try:
            with state.unit_of_work():
                outcome.append("ran")
        except StoreUnavailableError:
            outcome.append("store_unavailable")
        start_response("503 Service Unavailable", [])
        return [b""]

    tracker = InFlightTracker(slow_app)
    coordinator, _ = make_coordinator(state, registry, tracker, grace_period=0.1)
    request = threading.Thread(target=tracker, args=({}, lambda *a: None))
    request.start()
    assert started.wait(5)

    runner = threading.Thread(target=coordinator.run)
    runner.start()
    coordinator.request_shutdown("test")
    runner.join(5)
    assert not state.is_open

    release.set()
    request.join(5)
    assert outcome == ["store_unavailable"]


def test_run_twice_is_rejected(state: ServiceState, registry: SessionRegistry) -> None:
    coordinator, _ = make_coordinator(state, registry, InFlightTracker(idle_app))
    coordinator.request_shutdown("test")
    coordinator.run()

    with pytest.raises(RuntimeError):
        coordinator.run()


def test_shutdown_during_create_folder_commits_the_folder(
    config: AppConfig,
    state: ServiceState,
    registry: SessionRegistry,
    accounts: AccountService,
    claim_code,
) -> None:
    alice = accounts.claim_account(claim_code("ABC123"), "alice", "proof").account_id
    store = PausingStore(state)
    service = FilesystemService(store=store, storage=config.storage)
    created = []

    def create_folder_app(environ, start_response):
        created.append(service.create_folder(alice, None, "Photos"))
        start_response("200 OK", [])
        return [b"ok"]

    tracker = InFlightTracker(create_folder_app)
    coordinator, server = make_coordinator(state, registry, tracker)
    request = threading.Thread(target=tracker, args=({}, lambda *a: None))
    request.start()
    assert store.entered.wait(5)

    runner = threading.Thread(target=coordinator.run)
    runner.start()
    coordinator.request_shutdown("test")
    runner.join(0.3)
    assert runner.is_alive()
    assert "server_close" in server.calls
    assert state.is_open

    store.release.set()
    request.join(5)
    runner.join(5)
    assert not runner.is_alive()
    assert not state.is_open
    assert [entry.name for entry in created] == ["Photos"]

    reopened = Database.open(config.database)
    try:
        listing = Container(config, reopened).filesystem_service.get_filesystem(alice)
    finally:
        reopened.close()
    assert [entry.name for entry in listing] == ["Photos"]
