# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string
from datetime import UTC, datetime, timedelta

from treasury.domain.accounts.entities import (
    ClaimCode,
    ClaimCodeStatus,
    SessionGrant,
    SessionInfo,
    normalize_login,
)
from treasury.domain.accounts.exceptions import (
    ClaimCodeAlreadyUsedError,
    InvalidClaimCodeError,
    InvalidCredentialsError,
    LoginAlreadyTakenError,
    UnauthenticatedError,
)
from treasury.domain.accounts.repositories import PasswordHasher
from treasury.domain.store import TransactionalStore
from treasury.infrastructure.observability import record_auth_event
from treasury.infrastructure.sessions import SessionRegistry
from treasury.shared.config import AppConfig
from treasury.shared.errors import ValidationError
from treasury.shared.logging import logger

CLAIM_CODE_ALPHABET = string.ascii_uppercase + string.digits
_DUMMY_SALT_CONTEXT = b"treasury.dummy-salt:"


def _b64_len(num_bytes: int) -> int:
    return len(base64.urlsafe_b64encode(bytes(num_bytes)).rstrip(b"="))


class AccountService:
    """Claim codes, credentials and sessions.

    Unauthenticated entry points never reveal whether a login or claim code
    exists: unknown logins get a stable dummy salt and are checked against a
    dummy hash, and every credential failure is the same error.
    """

    def __init__(
        self,
        *,
        store: TransactionalStore,
        sessions: SessionRegistry,
        password_hasher: PasswordHasher,
        config: AppConfig,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._salt_bytes = config.security.client_salt_bytes
        self._claim_code_length = config.security.claim_code_length
        self._single_session = config.security.single_session
        self._default_quota = config.storage.default_quota_bytes
        self._secret = config.secret_key.encode("utf-8")
        self._dummy_hash = password_hasher.hash(secrets.token_urlsafe(32))

    def claim_account(
        self,
        code: str,
        login: str,
        password_proof: str,
        *,
        salt: str | None = None,
    ) -> SessionGrant:
        login = normalize_login(login)
        if not login:
            raise ValidationError(context={"fields": ["login"]})
        if salt is None:
            salt = self._new_salt()
        elif len(salt) != _b64_len(self._salt_bytes):
            raise ValidationError(context={"fields": ["salt"]})

        # The KDF is slow; run it before entering the store boundary.
        password_hash = self._password_hasher.hash(password_proof)
        now = datetime.now(UTC)

        with self._store.unit_of_work() as uow:
            claim = uow.claim_codes.get(code)
            if claim is None:
                raise InvalidClaimCodeError()
            if claim.status is ClaimCodeStatus.REDEEMED:
                raise ClaimCodeAlreadyUsedError()
            if claim.is_expired(now):
                raise InvalidClaimCodeError()
            if uow.accounts.find_by_login(login) is not None:
                raise LoginAlreadyTakenError()

            account = uow.accounts.add(
                login=login,
                client_salt=salt,
                password_hash=password_hash,
                quota_bytes=self._default_quota,
            )
            if not uow.claim_codes.mark_redeemed(code, account_id=account.id, redeemed_at=now):
                raise ClaimCodeAlreadyUsedError()

        logger.info(f"accounts.claim: created account={account.id} login={account.login}")
        record_auth_event("claim", "ok")
        return self._grant(account.id, account.login)

    def check_claim_code(self, code: str) -> bool:
        now = datetime.now(UTC)
        with self._store.unit_of_work() as uow:
            claim = uow.claim_codes.get(code)
        return claim is not None and claim.is_redeemable(now)

    def get_user_salt(self, login: str) -> str:
        login = normalize_login(login)
        with self._store.unit_of_work() as uow:
            account = uow.accounts.find_by_login(login)
        if account is not None:
            return account.client_salt
        return self._dummy_salt(login)

    def login(self, login: str, password_proof: str) -> SessionGrant:
        login = normalize_login(login)
        with self._store.unit_of_work() as uow:
            account = uow.accounts.find_by_login(login)

        hashed = account.password_hash if account is not None else self._dummy_hash
        proof_ok = self._password_hasher.verify(password_proof, hashed)
        if account is None or not proof_ok:
            logger.info("accounts.login: rejected")
            record_auth_event("login", "rejected")
            raise InvalidCredentialsError()

        if self._single_session:
            revoked = self._sessions.revoke_account(account.id)
            if revoked:
                logger.info(f"accounts.login: revoked {revoked} prior sessions account={account.id}")

        logger.info(f"accounts.login: ok account={account.id}")
        record_auth_event("login", "ok")
        return self._grant(account.id, account.login)

    def logout(self, token: str | None) -> None:
        if token and self._sessions.revoke(token):
            logger.info("accounts.logout: session revoked")
            record_auth_event("logout", "ok")

    def get_session_info(self, token: str | None) -> SessionInfo:
        info = self._sessions.resolve(token or "")
        if info is None:
            raise UnauthenticatedError()
        return info

    def generate_claim_code(self, expires_in: timedelta | None = None) -> ClaimCode:
        expires_at = datetime.now(UTC) + expires_in if expires_in else None
        with self._store.unit_of_work() as uow:
            code = self._new_claim_code()
            while uow.claim_codes.get(code) is not None:
                code = self._new_claim_code()
            claim = uow.claim_codes.add(code, expires_at=expires_at)
        logger.info(f"accounts.claim_code: generated expires_at={expires_at}")
        return claim

    def _grant(self, account_id: int, login: str) -> SessionGrant:
        token = self._sessions.issue(account_id, login)
        return SessionGrant(
            token=token,
            account_id=account_id,
            login=login,
            cookie=self._sessions.cookie_policy,
        )

    def _new_salt(self) -> str:
        return secrets.token_urlsafe(self._salt_bytes)

    def _new_claim_code(self) -> str:
        return "".join(secrets.choice(CLAIM_CODE_ALPHABET) for _ in range(self._claim_code_length))

    def _dummy_salt(self, login: str) -> str:
        digest = hmac.new(
            self._secret, _DUMMY_SALT_CONTEXT + login.encode("utf-8"), hashlib.sha512
        ).digest()
        return base64.urlsafe_b64encode(digest[: self._salt_bytes]).rstrip(b"=").decode("ascii")


__all__ = ["AccountService", "CLAIM_CODE_ALPHABET"]
