# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from identity.application.services.account_service import AccountService
from identity.domain.users.entities import User
from identity.domain.users.repositories import PasswordHasher, UserRepository
from identity.shared.errors import UnauthorizedError
from identity.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        accounts: AccountService,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._accounts = accounts

    def execute(self, user: User, current_password: str, new_password: str) -> User:
        if not self._password_hasher.verify(current_password, user.password_hash):
            raise UnauthorizedError()

        updated = user.with_password_hash(self._password_hasher.hash(new_password))
        self._users.change_password(updated)
        logger.info(f"user.password: changed user_id={user.id}")

        self._accounts.notify_password_changed(updated)
        return updated
