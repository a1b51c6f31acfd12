# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""JSON rendering of every error a request can end with."""

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from treasury.shared.logging import logger

from .base import AppError


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    return jsonify(error.to_dict()), error.status


def _error_code(exc: HTTPException) -> str:
    return (exc.name or "http_error").lower().replace(" ", "_")


def register_error_handler(app: Flask, *, debug_mode: bool = False) -> None:
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        where = f"{request.method} {request.path} account={getattr(g, 'account_id', None)}"
        if exc.is_server_fault:
            # The cause is chained by whoever raised it.
            logger.opt(exception=exc.__cause__ if debug_mode else None).error(
                f"{exc.code} on {where}"
            )
        else:
            logger.info(f"{exc.code} on {where}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        response = jsonify({"error": _error_code(exc)})
        return response, exc.code or HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"account={getattr(g, 'account_id', None)}, body_size={len(request.data)}"
            )
        else:
            logger.error(f"Error: {type(exc).__name__} on {request.method} {request.path}")
        return jsonify({"error": "internal_error"}), HTTPStatus.INTERNAL_SERVER_ERROR


__all__ = ["handle_app_error", "register_error_handler"]
