# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from .entities import Feature, User


class UserRepository(Protocol):
    """Account persistence.

    Lookups raise ``UserNotFoundError``; uniqueness violations raise
    ``UserAlreadyExistsError``; anything else raises ``RepositoryError``.
    """

    def get_by_username(self, username: str) -> User: ...
    def get_by_id(self, user_id: UUID) -> User: ...
    def create(self, user: User) -> User: ...
    def change_username(self, user: User) -> User: ...
    def change_password(self, user: User) -> None: ...
    def update_last_login(self, user: User, address: str | None) -> None: ...
    def add_feature(self, feature: Feature) -> None: ...
    def remove_feature(self, feature: Feature) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, user_id: UUID) -> str: ...
    def resolve(self, token: str) -> UUID: ...
