from __future__ import annotations

import string
import threading
from datetime import UTC, datetime, timedelta

import pytest

from treasury.application.services.account_service import CLAIM_CODE_ALPHABET, AccountService
from treasury.container import Container
from treasury.domain.accounts.exceptions import (
    ClaimCodeAlreadyUsedError,
    InvalidClaimCodeError,
    InvalidCredentialsError,
    LoginAlreadyTakenError,
    UnauthenticatedError,
)
from treasury.infrastructure.sessions import SessionRegistry
from treasury.shared.config import AppConfig
from treasury.shared.errors import AuthenticationError, ValidationError
from treasury.state import ServiceState

URLSAFE = set(string.ascii_letters + string.digits + "-_")


def test_claim_account_creates_account_and_session(
    accounts: AccountService, registry: SessionRegistry, claim_code
) -> None:
    claim_code("ABC123")

    grant = accounts.claim_account("ABC123", "Alice", "proof-1")

    assert grant.login == "alice"
    info = registry.resolve(grant.token)
    assert info is not None
    assert info.account_id == grant.account_id
    assert grant.cookie.same_site == "Strict"
    assert grant.cookie.http_only is True


def test_claim_code_is_single_use(accounts: AccountService, claim_code) -> None:
    claim_code("ABC123")
    accounts.claim_account("ABC123", "alice", "proof-1")

    with pytest.raises(ClaimCodeAlreadyUsedError):
        accounts.claim_account("ABC123", "bob", "proof-2")
    assert accounts.check_claim_code("ABC123") is False


def test_parallel_claims_have_exactly_one_winner(
    accounts: AccountService, state: ServiceState, claim_code
) -> None:
    claim_code("RACE01")
    workers = 8
    barrier = threading.Barrier(workers)
    successes: list[int] = []
    failures: list[Exception] = []
    lock = threading.Lock()

    def claim(i: int) -> None:
        barrier.wait()
        try:
            grant = accounts.claim_account("RACE01", f"user{i}", f"proof-{i}")
        except Exception as exc:
            with lock:
                failures.append(exc)
        else:
            with lock:
                successes.append(grant.account_id)

    threads = [threading.Thread(target=claim, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(successes) == 1
    assert len(failures) == workers - 1
    assert all(isinstance(exc, ClaimCodeAlreadyUsedError) for exc in failures)

    with state.unit_of_work() as uow:
        claim_row = uow.claim_codes.get("RACE01")
    assert claim_row is not None
    assert claim_row.account_id == successes[0]


def test_unknown_and_expired_codes_are_invalid(accounts: AccountService, claim_code) -> None:
    claim_code("OLD001", expires_at=datetime.now(UTC) - timedelta(minutes=1))

    with pytest.raises(InvalidClaimCodeError):
        accounts.claim_account("NOPE00", "alice", "proof")
    with pytest.raises(InvalidClaimCodeError):
        accounts.claim_account("OLD001", "alice", "proof")


def test_login_already_taken_leaves_code_unused(accounts: AccountService, claim_code) -> None:
    claim_code("CODE01")
    claim_code("CODE02")
    accounts.claim_account("CODE01", "alice", "proof")

    with pytest.raises(LoginAlreadyTakenError):
        accounts.claim_account("CODE02", "ALICE", "proof")
    assert accounts.check_claim_code("CODE02") is True


def test_check_claim_code_is_generic(accounts: AccountService, claim_code) -> None:
    claim_code("LIVE01")
    claim_code("GONE01", expires_at=datetime.now(UTC) - timedelta(seconds=1))

    assert accounts.check_claim_code("LIVE01") is True
    assert accounts.check_claim_code("GONE01") is False
    assert accounts.check_claim_code("MISSING") is False


def test_claim_with_client_salt_keeps_it(accounts: AccountService, claim_code) -> None:
    claim_code("SALT01")
    salt = "A" * 22

    accounts.claim_account("SALT01", "alice", "proof", salt=salt)

    assert accounts.get_user_salt("alice") == salt


def test_claim_rejects_salt_of_wrong_length(accounts: AccountService, claim_code) -> None:
    claim_code("SALT02")

    with pytest.raises(ValidationError):
        accounts.claim_account("SALT02", "alice", "proof", salt="short-salt")


def test_dummy_salt_is_stable_and_shaped_like_a_real_one(
    accounts: AccountService, claim_code
) -> None:
    claim_code("REAL01")
    accounts.claim_account("REAL01", "alice", "proof")
    real = accounts.get_user_salt("alice")

    first = accounts.get_user_salt("nobody")
    second = accounts.get_user_salt("NoBody ")

    assert first == second
    assert first != accounts.get_user_salt("somebody-else")
    assert len(first) == len(real)
    assert set(first) <= URLSAFE
    assert set(real) <= URLSAFE


def test_dummy_salt_matches_real_salt_at_largest_salt_size(config: AppConfig, database) -> None:
    security = config.security.model_copy(update={"client_salt_bytes": 64})
    container = Container(config.model_copy(update={"security": security}), database)
    service = container.account_service
    with container.state.unit_of_work() as uow:
        uow.claim_codes.add("BIG001", expires_at=None)
    service.claim_account("BIG001", "alice", "proof")

    real = service.get_user_salt("alice")
    dummy = service.get_user_salt("nobody")

    assert len(real) == len(dummy) == 86


def test_dummy_salt_depends_on_secret_key(config: AppConfig, database) -> None:
    other = config.model_copy(update={"secret_key": "another-secret"})

    salt_a = Container(config, database).account_service.get_user_salt("ghost")
    salt_b = Container(other, database).account_service.get_user_salt("ghost")

    assert salt_a != salt_b


def test_login_and_logout(accounts: AccountService, registry: SessionRegistry, claim_code) -> None:
    claim_code("LOGIN1")
    accounts.claim_account("LOGIN1", "alice", "proof")

    grant = accounts.login("Alice", "proof")
    assert accounts.get_session_info(grant.token).login == "alice"

    accounts.logout(grant.token)
    with pytest.raises(UnauthenticatedError):
        accounts.get_session_info(grant.token)

    # Logging out twice or without a token is harmless.
    accounts.logout(grant.token)
    accounts.logout(None)


def test_invalid_credentials_do_not_reveal_cause(accounts: AccountService, claim_code) -> None:
    claim_code("CREDS1")
    accounts.claim_account("CREDS1", "alice", "proof")

    with pytest.raises(InvalidCredentialsError) as wrong_proof:
        accounts.login("alice", "wrong")
    with pytest.raises(InvalidCredentialsError) as unknown_login:
        accounts.login("mallory", "proof")

    assert isinstance(wrong_proof.value, AuthenticationError)
    assert wrong_proof.value.to_dict() == unknown_login.value.to_dict()


def test_multiple_sessions_allowed_by_default(accounts: AccountService, claim_code) -> None:
    claim_code("MULTI1")
    first = accounts.claim_account("MULTI1", "alice", "proof")
    second = accounts.login("alice", "proof")

    assert accounts.get_session_info(first.token).account_id == first.account_id
    assert accounts.get_session_info(second.token).account_id == first.account_id


def test_single_session_policy_revokes_prior_sessions(config: AppConfig, database) -> None:
    security = config.security.model_copy(update={"single_session": True})
    container = Container(config.model_copy(update={"security": security}), database)
    accounts = container.account_service
    with container.state.unit_of_work() as uow:
        uow.claim_codes.add("SINGLE", expires_at=None)

    first = accounts.claim_account("SINGLE", "alice", "proof")
    second = accounts.login("alice", "proof")

    with pytest.raises(UnauthenticatedError):
        accounts.get_session_info(first.token)
    assert accounts.get_session_info(second.token).login == "alice"


def test_generate_claim_code(accounts: AccountService, config: AppConfig) -> None:
    claim = accounts.generate_claim_code(timedelta(hours=1))

    assert len(claim.code) == config.security.claim_code_length
    assert set(claim.code) <= set(CLAIM_CODE_ALPHABET)
    assert claim.expires_at is not None
    assert accounts.check_claim_code(claim.code) is True

    forever = accounts.generate_claim_code()
    assert forever.expires_at is None
    assert forever.code != claim.code
