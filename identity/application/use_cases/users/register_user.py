# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from identity.application.services.account_service import AccountService
from identity.domain.users.entities import User


class RegisterUserUseCase:
    def __init__(self, *, accounts: AccountService) -> None:
        self._accounts = accounts

    def execute(self, email: str, password: str) -> User:
        return self._accounts.register(email, password)
