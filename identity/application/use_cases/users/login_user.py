# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime

from identity.domain.users.exceptions import (
    AccountBannedError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from identity.domain.users.repositories import PasswordHasher, TokenIssuer, UserRepository
from identity.shared.errors import RepositoryError
from identity.shared.logging import logger


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenIssuer,
        password_hasher: PasswordHasher,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher
        self._clock = clock or (lambda: datetime.now(UTC))
        # Verified against for unknown usernames so both failure paths cost one hash check.
        self._dummy_hash = password_hasher.hash(secrets.token_urlsafe(16))

    def execute(self, username: str, password: str, ip_address: str | None = None) -> str:
        try:
            user = self._users.get_by_username(username)
        except UserNotFoundError:
            self._password_hasher.verify(password, self._dummy_hash)
            raise InvalidCredentialsError() from None

        if not self._password_hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()

        # Ban status is only revealed to callers who proved the credential.
        if user.is_banned(self._clock()):
            logger.info(f"auth.login: banned user_id={user.id}")
            raise AccountBannedError(user.ban_reason)

        try:
            self._users.update_last_login(user, ip_address)
        except (RepositoryError, UserNotFoundError):
            logger.opt(exception=True).warning(
                f"auth.login: last login update failed user_id={user.id}"
            )

        return self._tokens.issue(user.id)
