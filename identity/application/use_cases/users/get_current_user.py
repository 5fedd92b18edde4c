"""Use-case for resolving the caller's own account from a bearer token."""

from __future__ import annotations

from identity.application.services.account_service import AccountService
from identity.domain.users.entities import User


class GetCurrentUserUseCase:
    def __init__(self, *, accounts: AccountService) -> None:
        self._accounts = accounts

    def execute(self, token: str) -> User:
        return self._accounts.resolve_subject(token)
