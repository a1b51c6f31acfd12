from __future__ import annotations

from datetime import timedelta

from treasury.domain.accounts.entities import CookiePolicy
from treasury.infrastructure.sessions import SessionRegistry
from treasury.shared.config import SecurityConfig

COOKIE = CookiePolicy(secure=False, same_site="Strict", http_only=True, max_age_seconds=600)


def make_registry(clock, *, absolute: float | None = None) -> SessionRegistry:
    return SessionRegistry(
        idle_timeout=timedelta(seconds=600),
        absolute_timeout=timedelta(seconds=absolute) if absolute else None,
        cookie_policy=COOKIE,
        clock=clock,
    )


def test_activity_slides_the_idle_window(clock) -> None:
    registry = make_registry(clock)
    token = registry.issue(1, "alice")

    for _ in range(5):
        clock.advance(500)
        info = registry.resolve(token)
        assert info is not None
        assert info.last_activity_at == clock.now


def test_idle_session_expires(clock) -> None:
    registry = make_registry(clock)
    token = registry.issue(1, "alice")

    clock.advance(600)
    assert registry.resolve(token) is not None

    clock.advance(601)
    assert registry.resolve(token) is None
    assert registry.active_count() == 0


def test_absolute_lifetime_caps_active_sessions(clock) -> None:
    registry = make_registry(clock, absolute=1000)
    token = registry.issue(1, "alice")

    clock.advance(500)
    assert registry.resolve(token) is not None
    clock.advance(500)
    assert registry.resolve(token) is not None
    clock.advance(1)
    assert registry.resolve(token) is None


def test_tokens_are_unique_and_opaque(clock) -> None:
    registry = make_registry(clock)
    tokens = {registry.issue(1, "alice") for _ in range(50)}

    assert len(tokens) == 50
    assert all("alice" not in token for token in tokens)
    assert all(len(token) >= 64 for token in tokens)


def test_unknown_or_empty_token_resolves_to_none(clock) -> None:
    registry = make_registry(clock)

    assert registry.resolve("") is None
    assert registry.resolve("not-a-token") is None


def test_revoke_and_revoke_account(clock) -> None:
    registry = make_registry(clock)
    a1 = registry.issue(1, "alice")
    a2 = registry.issue(1, "alice")
    b1 = registry.issue(2, "bob")

    assert registry.revoke(a1) is True
    assert registry.revoke(a1) is False
    assert registry.revoke_account(1) == 1
    assert registry.resolve(a2) is None
    assert registry.resolve(b1) is not None


def test_sweep_removes_only_expired_sessions(clock) -> None:
    registry = make_registry(clock)
    stale = registry.issue(1, "alice")
    clock.advance(400)
    fresh = registry.issue(2, "bob")
    clock.advance(300)

    assert registry.sweep_expired() == 1
    assert registry.resolve(stale) is None
    assert registry.resolve(fresh) is not None


def test_clear_drops_everything(clock) -> None:
    registry = make_registry(clock)
    registry.issue(1, "alice")
    registry.issue(2, "bob")

    registry.clear()

    assert registry.active_count() == 0


def test_from_config_builds_cookie_policy() -> None:
    security = SecurityConfig(
        cookie_secure=True, session_idle_timeout=120, session_absolute_timeout=3600
    )

    registry = SessionRegistry.from_config(security)

    assert registry.cookie_policy == CookiePolicy(
        secure=True, same_site="Strict", http_only=True, max_age_seconds=120
    )
