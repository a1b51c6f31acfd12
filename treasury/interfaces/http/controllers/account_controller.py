# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from treasury.application.services.account_service import AccountService
from treasury.interfaces.http.dto.account import (
    AuthSuccessDTO,
    CheckClaimCodeRequestDTO,
    ClaimAccountRequestDTO,
    ClaimCodeStatusDTO,
    GetUserSaltRequestDTO,
    LoginRequestDTO,
    SessionInfoDTO,
    UserSaltDTO,
)
from treasury.interfaces.http.session_guard import (
    current_token,
    end_session,
    session_required,
    start_session,
)
from treasury.shared.config import SecurityConfig
from treasury.shared.errors.validation import raise_validation_error
from treasury.shared.logging import logger
from treasury.shared.middleware.rate_limit import rate_limit


class AccountController:
    def __init__(self, *, accounts: AccountService, security: SecurityConfig) -> None:
        self._accounts = accounts
        self._security = security

    def claim_account(self) -> tuple[Response, int]:
        try:
            dto = ClaimAccountRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        grant = self._accounts.claim_account(dto.code, dto.login, dto.proof, salt=dto.salt)
        start_session(grant)
        logger.info(f"account.claim: ok account={grant.account_id}")
        return jsonify(AuthSuccessDTO(login=grant.login).model_dump()), 200

    def check_claim_code(self) -> tuple[Response, int]:
        try:
            dto = CheckClaimCodeRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        valid = self._accounts.check_claim_code(dto.code)
        return jsonify(ClaimCodeStatusDTO(valid=valid).model_dump()), 200

    def get_user_salt(self) -> tuple[Response, int]:
        try:
            dto = GetUserSaltRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        salt = self._accounts.get_user_salt(dto.login)
        return jsonify(UserSaltDTO(salt=salt).model_dump()), 200

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        grant = self._accounts.login(dto.login, dto.proof)
        start_session(grant)
        return jsonify(AuthSuccessDTO(login=grant.login).model_dump()), 200

    def logout(self) -> tuple[Response, int]:
        self._accounts.logout(current_token())
        end_session()
        return jsonify({"ok": True}), 200

    def get_session_info(self) -> tuple[Response, int]:
        payload = SessionInfoDTO(account_id=g.account_id, login=g.login)
        return jsonify(payload.model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        guard = session_required(self._accounts)
        strict = rate_limit(self._security, limit=5, window_seconds=60.0)
        limited = rate_limit(self._security)

        bp = Blueprint("account", __name__, url_prefix="/api")
        bp.add_url_rule("/claimaccount", view_func=strict(self.claim_account), methods=["POST"])
        bp.add_url_rule(
            "/checkclaimcode", view_func=limited(self.check_claim_code), methods=["POST"]
        )
        bp.add_url_rule("/getusersalt", view_func=limited(self.get_user_salt), methods=["POST"])
        bp.add_url_rule(
            "/getsessioninfo", view_func=guard(self.get_session_info), methods=["GET"]
        )
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/login", view_func=limited(self.login), methods=["POST"])
        return bp
