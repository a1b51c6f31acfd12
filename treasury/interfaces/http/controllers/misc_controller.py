# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from treasury.infrastructure.observability import render_metrics
from treasury.infrastructure.sessions import SessionRegistry
from treasury.state import ServiceState


class MiscController:
    def __init__(
        self, *, state: ServiceState, sessions: SessionRegistry, metrics_enabled: bool = False
    ) -> None:
        self._state = state
        self._sessions = sessions
        self._metrics_enabled = metrics_enabled

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        if self._metrics_enabled:
            bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True}
        try:
            self._state.check_database()
            status["database"] = "ok"
        except Exception as exc:
            status["ok"] = False
            status["database"] = f"error: {type(exc).__name__}"
        return jsonify(status), 200 if status["ok"] else 503

    def metrics(self) -> Response:
        body, content_type = render_metrics(self._sessions.active_count())
        return Response(body, content_type=content_type)
