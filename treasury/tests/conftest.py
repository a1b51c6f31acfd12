from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from treasury.application.services.account_service import AccountService
from treasury.application.services.filesystem_service import FilesystemService
from treasury.container import Container
from treasury.infrastructure.db import Database
from treasury.infrastructure.sessions import SessionRegistry
from treasury.shared.config import (
    AppConfig,
    DatabaseConfig,
    SecurityConfig,
    ServerConfig,
    StorageConfig,
)
from treasury.state import ServiceState


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return self.now.timestamp()

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        app_env="test",
        secret_key="test-secret",
        server=ServerConfig(shutdown_grace_period=2.0),
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'treasury.db'}"),
        storage=StorageConfig(
            user_files_dir=tmp_path / "user_files",
            default_quota_bytes=1000,
        ),
        security=SecurityConfig(
            password_hash_method="pbkdf2:sha256:1000",
            enable_rate_limit=False,
        ),
    )


@pytest.fixture()
def database(config: AppConfig) -> Iterator[Database]:
    db = Database.open(config.database)
    yield db
    if not db.closed:
        db.close()


@pytest.fixture()
def container(config: AppConfig, database: Database) -> Container:
    return Container(config, database)


@pytest.fixture()
def state(container: Container) -> ServiceState:
    return container.state


@pytest.fixture()
def registry(container: Container) -> SessionRegistry:
    return container.session_registry


@pytest.fixture()
def accounts(container: Container) -> AccountService:
    return container.account_service


@pytest.fixture()
def filesystem(container: Container) -> FilesystemService:
    return container.filesystem_service


@pytest.fixture()
def claim_code(state: ServiceState):
    """Insert a claim code with a known value."""

    def _make(code: str, *, expires_at: datetime | None = None) -> str:
        with state.unit_of_work() as uow:
            uow.claim_codes.add(code, expires_at=expires_at)
        return code

    return _make


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
