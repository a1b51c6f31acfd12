# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time

from flask import Flask, g, request

from treasury.infrastructure.observability import record_request
from treasury.shared.logging import clear_correlation_id, logger, set_correlation_id


def client_address() -> str:
    """Peer address of the request.

    Behind a trusted proxy ``create_app`` installs ``ProxyFix``, which has
    already replaced ``remote_addr`` with the forwarded client address.
    """
    return request.remote_addr or "unknown"


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    sensitive_headers = {"authorization", "cookie", "x-csrf-token", "x-session-id"}

    sanitized = {}
    for key, value in headers.items():
        if key.lower() in sensitive_headers:
            sanitized[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            sanitized[key] = value

    return sanitized


def configure_request_logging(
    app: Flask, *, debug_mode: bool = False, metrics_enabled: bool = False
) -> None:
    @app.before_request
    def _before_request() -> None:
        set_correlation_id(request.headers.get("X-Request-ID") or secrets.token_urlsafe(8))
        g.request_start_time = time.perf_counter()

        if debug_mode:
            headers = _sanitize_headers(dict(request.headers))
            logger.debug(
                f"Request started: {request.method} {request.path} "
                f"from {client_address()}, headers={headers}, body_size={len(request.data)}"
            )

    @app.after_request
    def _after_request(response):
        start_time = getattr(g, "request_start_time", time.perf_counter())
        duration = time.perf_counter() - start_time
        logger.info(
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {duration * 1000.0:.1f} ms from {client_address()} "
            f"account={getattr(g, 'account_id', None)}"
        )
        if metrics_enabled:
            endpoint = request.url_rule.rule if request.url_rule else "unmatched"
            record_request(endpoint, response.status_code, duration)
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(
                f"Request error: {type(exc).__name__} on {request.method} {request.path}"
            )
        clear_correlation_id()


__all__ = ["client_address", "configure_request_logging"]
