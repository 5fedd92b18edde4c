# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from identity.domain.users.entities import User
from identity.domain.users.repositories import UserRepository
from identity.shared.logging import logger


class ChangeUsernameUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user: User, new_username: str) -> User:
        if new_username == user.username:
            return user
        updated = self._users.change_username(user.with_username(new_username))
        logger.info(f"user.username: changed user_id={user.id}")
        return updated
