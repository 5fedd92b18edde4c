from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

from identity.domain.users.entities import User


def _user(**overrides) -> User:
    return replace(
        User.new(username="alice", email="alice@example.com", password_hash="hash"),
        **overrides,
    )


def test_user_without_ban_is_not_banned() -> None:
    assert _user().is_banned() is False


def test_ban_in_future_is_active() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    user = _user(ban_expiration=now + timedelta(seconds=1), ban_reason="spam")

    assert user.is_banned(now) is True


def test_expired_ban_is_not_active() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)

    assert _user(ban_expiration=now - timedelta(seconds=1)).is_banned(now) is False
    assert _user(ban_expiration=now).is_banned(now) is False


def test_naive_ban_expiration_is_treated_as_utc() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    user = _user(ban_expiration=datetime(2026, 1, 2))

    assert user.is_banned(now) is True


def test_public_dict_never_contains_password_hash() -> None:
    user = _user(features=frozenset({"beta", "admin"}))

    payload = user.to_public_dict()

    assert "password_hash" not in payload
    assert "hash" not in payload.values()
    assert payload["id"] == str(user.id)
    assert payload["features"] == ["admin", "beta"]


def test_with_username_keeps_identity() -> None:
    user = _user()

    renamed = user.with_username("bob")

    assert renamed.id == user.id
    assert renamed.username == "bob"
    assert user.username == "alice"
