from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest

from identity.application.services.tokens import JwtTokenIssuer
from identity.domain.users.exceptions import InvalidTokenError

SECRET = "AToAQz1ZtiDFPd6S5O4lyPCixPpo5I58"


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture()
def issuer(clock: MutableClock) -> JwtTokenIssuer:
    return JwtTokenIssuer(SECRET, ttl=timedelta(hours=1), clock=clock)


def test_resolve_returns_issued_subject(issuer: JwtTokenIssuer) -> None:
    user_id = uuid4()

    token = issuer.issue(user_id)

    assert token
    assert issuer.resolve(token) == user_id


def test_claims_carry_expiry_from_ttl(issuer: JwtTokenIssuer, clock: MutableClock) -> None:
    claims = issuer.decode(issuer.issue(uuid4()))

    assert claims.issued_at == clock.now
    assert claims.expires_at == clock.now + timedelta(hours=1)


def test_token_is_invalid_after_expiry(issuer: JwtTokenIssuer, clock: MutableClock) -> None:
    token = issuer.issue(uuid4())

    clock.now += timedelta(hours=1, seconds=1)

    with pytest.raises(InvalidTokenError) as exc_info:
        issuer.resolve(token)
    assert exc_info.value.reason == "expired"


def test_token_signed_with_other_secret_is_invalid(clock: MutableClock) -> None:
    foreign = JwtTokenIssuer("another-secret-another-secret-xx", clock=clock)
    issuer = JwtTokenIssuer(SECRET, clock=clock)

    with pytest.raises(InvalidTokenError) as exc_info:
        issuer.resolve(foreign.issue(uuid4()))
    assert exc_info.value.reason == "signature"


@pytest.mark.parametrize(
    "claims",
    [
        {"iat": 1767268800, "exp": 1767272400},
        {"sub": "not-a-uuid", "iat": 1767268800, "exp": 1767272400},
        {"sub": str(uuid4()), "iat": 1767268800},
    ],
    ids=["missing-subject", "garbled-subject", "missing-expiry"],
)
def test_claim_shape_mismatch_is_invalid(issuer: JwtTokenIssuer, claims: dict) -> None:
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        issuer.resolve(token)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c"])
def test_garbage_token_is_invalid(issuer: JwtTokenIssuer, garbage: str) -> None:
    with pytest.raises(InvalidTokenError):
        issuer.resolve(garbage)


def test_all_failures_share_one_public_error(issuer: JwtTokenIssuer, clock: MutableClock) -> None:
    expired = issuer.issue(uuid4())
    clock.now += timedelta(days=1)

    errors = []
    for token in (expired, "abc"):
        with pytest.raises(InvalidTokenError) as exc_info:
            issuer.resolve(token)
        errors.append(exc_info.value.to_dict())

    assert errors[0] == errors[1] == {"error": "invalid_token"}


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        JwtTokenIssuer("")
