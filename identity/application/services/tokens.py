"""JWT session tokens.

Tokens carry the account id as ``sub`` together with ``iat``/``exp`` and
are verified per request from the signature and claims alone; nothing is
persisted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from identity.domain.users.exceptions import InvalidTokenError
from identity.domain.users.repositories import TokenIssuer
from identity.shared.logging import logger

_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


@dataclass(slots=True, frozen=True)
class TokenClaims:
    subject: UUID
    issued_at: datetime
    expires_at: datetime


class JwtTokenIssuer(TokenIssuer):
    """Issues and verifies HMAC-signed access tokens.

    The signing secret is injected at construction so each process (and
    each test) owns its own key.
    """

    TOKEN_TYPE = "access"

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
        issuer: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)
        if ttl <= timedelta(0):
            msg = "JWT ttl must be positive"
            raise ValueError(msg)

        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm
        self._issuer = issuer
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, user_id: UUID) -> str:
        now = self._clock()
        payload: dict[str, object] = {
            "sub": str(user_id),
            "type": self.TOKEN_TYPE,
            "iat": now,
            "exp": now + self._ttl,
        }
        if self._issuer:
            payload["iss"] = self._issuer
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def resolve(self, token: str) -> UUID:
        return self.decode(token).subject

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = self._decode_verified(token)
            subject = payload.get("sub")
            if not isinstance(subject, str):
                raise InvalidTokenError("subject")
            if payload.get("type", self.TOKEN_TYPE) != self.TOKEN_TYPE:
                raise InvalidTokenError("malformed")
            return TokenClaims(
                subject=UUID(subject),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
            )
        except InvalidTokenError as exc:
            logger.debug(f"token: rejected reason={exc.reason}")
            raise
        except (KeyError, ValueError, TypeError) as exc:
            logger.debug(f"token: rejected reason=subject ({type(exc).__name__})")
            raise InvalidTokenError("subject") from exc

    def _decode_verified(self, token: str) -> dict:
        if not token:
            raise InvalidTokenError("malformed")
        # Expiry is checked against the injected clock instead of the wall clock.
        now = self._clock().timestamp()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenError("signature") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("malformed") from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= now:
            raise InvalidTokenError("expired")
        return payload


__all__ = ["JwtTokenIssuer", "TokenClaims"]
