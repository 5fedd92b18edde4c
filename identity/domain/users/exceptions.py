# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from identity.shared.errors.base import DomainError


class UserAlreadyExistsError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.CONFLICT


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.NOT_FOUND


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    text_body = "invalid credentials"


class AccountBannedError(DomainError):
    code = "account_banned"
    status = HTTPStatus.UNPROCESSABLE_ENTITY

    def __init__(self, reason: str | None) -> None:
        super().__init__(context={"reason": reason or ""})
        self.reason = reason or ""

    def to_dict(self) -> dict[str, Any]:
        return {"message": "user is banned", "reason": self.reason}


class InvalidTokenError(DomainError):
    """Any token that fails decoding, signature, expiry or claim checks.

    ``reason`` is for logs only; callers must not branch on it.
    """

    code = "invalid_token"
    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason
