# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import g, request, session

from treasury.application.services.account_service import AccountService
from treasury.domain.accounts.entities import SessionGrant
from treasury.domain.accounts.exceptions import UnauthenticatedError
from treasury.shared.logging import logger

SESSION_TOKEN_KEY = "token"


def current_token() -> str | None:
    return session.get(SESSION_TOKEN_KEY)


def start_session(grant: SessionGrant) -> None:
    """Put the token in Flask's signed session cookie."""
    session.clear()
    session[SESSION_TOKEN_KEY] = grant.token
    session.permanent = True


def end_session() -> None:
    session.clear()


def session_required(accounts: AccountService) -> Callable[[Callable], Callable]:
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def inner(*a, **kw):
            try:
                info = accounts.get_session_info(current_token())
            except UnauthenticatedError:
                logger.warning(
                    f"Auth failed (no session or expired) on {request.method} {request.path} "
                    f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
                )
                end_session()
                raise

            g.account_id = info.account_id
            g.login = info.login
            logger.debug(f"Auth OK: account={info.account_id} {request.method} {request.path}")
            return f(*a, **kw)

        return inner

    return decorator


__all__ = [
    "SESSION_TOKEN_KEY",
    "current_token",
    "end_session",
    "session_required",
    "start_session",
]
