# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from flask import Flask

from treasury.app import create_app
from treasury.application.services.account_service import AccountService
from treasury.application.services.filesystem_service import FilesystemService
from treasury.application.services.password_hashing import WerkzeugPasswordHasher
from treasury.infrastructure.db import Database
from treasury.infrastructure.sessions import SessionRegistry
from treasury.interfaces.http.controllers.account_controller import AccountController
from treasury.interfaces.http.controllers.filesystem_controller import FilesystemController
from treasury.interfaces.http.controllers.misc_controller import MiscController
from treasury.interfaces.http.inflight import InFlightTracker
from treasury.shared.config import AppConfig
from treasury.state import ServiceState


class Container:
    """Wires one service instance graph around an already opened database."""

    def __init__(self, config: AppConfig, database: Database) -> None:
        self.config = config
        self._database = database

    @cached_property
    def state(self) -> ServiceState:
        return ServiceState(self.config, self._database)

    @cached_property
    def session_registry(self) -> SessionRegistry:
        return SessionRegistry.from_config(self.config.security)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(
            method=self.config.security.password_hash_method,
            salt_length=self.config.security.password_salt_length,
        )

    @cached_property
    def account_service(self) -> AccountService:
        return AccountService(
            store=self.state,
            sessions=self.session_registry,
            password_hasher=self.password_hasher,
            config=self.config,
        )

    @cached_property
    def filesystem_service(self) -> FilesystemService:
        return FilesystemService(store=self.state, storage=self.config.storage)

    @cached_property
    def account_controller(self) -> AccountController:
        return AccountController(accounts=self.account_service, security=self.config.security)

    @cached_property
    def filesystem_controller(self) -> FilesystemController:
        return FilesystemController(
            accounts=self.account_service, filesystem=self.filesystem_service
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(
            state=self.state,
            sessions=self.session_registry,
            metrics_enabled=self.config.observability.metrics_enabled,
        )

    @cached_property
    def flask_app(self) -> Flask:
        return create_app(self)

    @cached_property
    def wsgi_app(self) -> InFlightTracker:
        return InFlightTracker(self.flask_app)
