# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from treasury.shared.errors import register_error_handler
from treasury.shared.logging import logger
from treasury.shared.middleware.request_logger import configure_request_logging

if TYPE_CHECKING:
    from treasury.container import Container


def create_app(container: Container) -> Flask:
    config = container.config
    cookie = container.session_registry.cookie_policy

    app = Flask(__name__)
    proxy_hops = config.security.trusted_proxy_hops
    if proxy_hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_hops)  # type: ignore[method-assign]
    register_error_handler(app, debug_mode=config.debug_logging)
    configure_request_logging(
        app,
        debug_mode=config.debug_logging,
        metrics_enabled=config.observability.metrics_enabled,
    )

    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_NAME="treasury_session",
        SESSION_COOKIE_HTTPONLY=cookie.http_only,
        SESSION_COOKIE_SECURE=cookie.secure,
        SESSION_COOKIE_SAMESITE=cookie.same_site,
        SESSION_REFRESH_EACH_REQUEST=True,
        PERMANENT_SESSION_LIFETIME=timedelta(seconds=cookie.max_age_seconds),
    )

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}},
        "methods": ["GET", "POST"],
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.account_controller.as_blueprint())
    app.register_blueprint(container.filesystem_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )

        return resp

    logger.info("Flask app initialized")
    return app


__all__ = ["create_app"]
