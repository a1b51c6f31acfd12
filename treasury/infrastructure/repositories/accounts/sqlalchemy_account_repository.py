# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from treasury.domain.accounts.entities import Account as DomainAccount
from treasury.domain.accounts.entities import ClaimCode as DomainClaimCode
from treasury.domain.accounts.entities import ClaimCodeStatus
from treasury.domain.accounts.exceptions import LoginAlreadyTakenError
from treasury.domain.accounts.repositories import AccountRepository, ClaimCodeRepository
from treasury.infrastructure.db.models import Account, ClaimCode


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_account(row: Account) -> DomainAccount:
    return DomainAccount(
        id=row.id,
        login=row.login,
        client_salt=row.client_salt,
        password_hash=row.password_hash,
        quota_bytes=int(row.quota_bytes),
        created_at=as_utc(row.created_at) or datetime.now(UTC),
    )


def _to_claim_code(row: ClaimCode) -> DomainClaimCode:
    return DomainClaimCode(
        code=row.code,
        status=ClaimCodeStatus(row.status),
        created_at=as_utc(row.created_at) or datetime.now(UTC),
        expires_at=as_utc(row.expires_at),
        redeemed_at=as_utc(row.redeemed_at),
        account_id=row.account_id,
    )


class SqlAlchemyAccountRepository(AccountRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_login(self, login: str) -> DomainAccount | None:
        row = self._session.scalars(select(Account).where(Account.login == login)).first()
        return _to_account(row) if row else None

    def find_by_id(self, account_id: int) -> DomainAccount | None:
        row = self._session.get(Account, account_id)
        return _to_account(row) if row else None

    def add(
        self, *, login: str, client_salt: str, password_hash: str, quota_bytes: int
    ) -> DomainAccount:
        row = Account(
            login=login,
            client_salt=client_salt,
            password_hash=password_hash,
            quota_bytes=quota_bytes,
            created_at=datetime.now(UTC),
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise LoginAlreadyTakenError() from exc
        return _to_account(row)


class SqlAlchemyClaimCodeRepository(ClaimCodeRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, code: str) -> DomainClaimCode | None:
        row = self._session.get(ClaimCode, code)
        return _to_claim_code(row) if row else None

    def add(self, code: str, *, expires_at: datetime | None = None) -> DomainClaimCode:
        row = ClaimCode(
            code=code,
            status=ClaimCodeStatus.UNUSED.value,
            created_at=datetime.now(UTC),
            expires_at=expires_at,
        )
        self._session.add(row)
        self._session.flush()
        return _to_claim_code(row)

    def mark_redeemed(self, code: str, *, account_id: int, redeemed_at: datetime) -> bool:
        """Flip ``code`` from unused to redeemed; False if someone got there first."""
        result = self._session.execute(
            update(ClaimCode)
            .where(
                ClaimCode.code == code,
                ClaimCode.status == ClaimCodeStatus.UNUSED.value,
            )
            .values(
                status=ClaimCodeStatus.REDEEMED.value,
                redeemed_at=redeemed_at,
                account_id=account_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
