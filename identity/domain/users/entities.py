# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass(slots=True, frozen=True)
class User:

    id: UUID
    username: str
    password_hash: str
    email: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    activated_at: datetime | None = None
    ban_expiration: datetime | None = None
    ban_reason: str | None = None
    last_login_at: datetime | None = None
    last_login_ip: str | None = None
    features: frozenset[str] = frozenset()

    @classmethod
    def new(cls, *, username: str, email: str | None, password_hash: str) -> User:
        return cls(id=uuid4(), username=username, email=email, password_hash=password_hash)

    def is_banned(self, now: datetime | None = None) -> bool:
        if self.ban_expiration is None:
            return False
        now = now or datetime.now(UTC)
        expiration = self.ban_expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=UTC)
        return expiration > now

    def with_username(self, username: str) -> User:
        return replace(self, username=username)

    def with_password_hash(self, password_hash: str) -> User:
        return replace(self, password_hash=password_hash)

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "created_at": _isoformat(self.created_at),
            "activated_at": _isoformat(self.activated_at),
            "last_login_at": _isoformat(self.last_login_at),
            "features": sorted(self.features),
        }


@dataclass(slots=True, frozen=True)
class Feature:

    user_id: UUID
    name: str


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
