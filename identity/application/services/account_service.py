# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
import secrets

from identity.application.interfaces import (
    ActivationEmail,
    Notification,
    NotificationDispatcher,
    PasswordWasChanged,
)
from identity.domain.users.entities import Feature, User
from identity.domain.users.exceptions import (
    InvalidTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from identity.domain.users.repositories import PasswordHasher, TokenIssuer, UserRepository
from identity.shared.errors import UnauthenticatedError
from identity.shared.logging import logger

_USERNAME_UNSAFE = re.compile(r"[^a-z0-9_.-]+")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
_SUFFIX_ATTEMPTS = 5


def username_from_email(email: str) -> str:
    """Derive the initial username from the local part of an email address.

    The result always satisfies the rename rules: it starts with a letter
    and is padded with zeros up to the minimum length.
    """
    local_part = email.split("@", 1)[0].lower()
    username = _USERNAME_UNSAFE.sub("_", local_part).strip("_.-")
    if not username or not username[0].isalpha():
        username = f"u{username}"
    return username[:USERNAME_MAX_LENGTH].ljust(USERNAME_MIN_LENGTH, "0")


def _with_suffix(username: str) -> str:
    suffix = secrets.token_hex(2)
    return f"{username[: USERNAME_MAX_LENGTH - len(suffix) - 1]}-{suffix}"


class AccountService:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        tokens: TokenIssuer,
        notifications: NotificationDispatcher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._tokens = tokens
        self._notifications = notifications

    def resolve_subject(self, token: str) -> User:
        try:
            user_id = self._tokens.resolve(token)
            return self._users.get_by_id(user_id)
        except (InvalidTokenError, UserNotFoundError) as exc:
            logger.info(f"account.resolve_subject: rejected ({exc.code})")
            raise UnauthenticatedError() from exc

    def register(self, email: str, password: str) -> User:
        """Create an account for ``email``.

        When another account already holds the derived username, a short
        random suffix is appended, so ``UserAlreadyExistsError`` means the
        email itself is taken.
        """
        draft = User.new(
            username=username_from_email(email),
            email=email,
            password_hash=self._password_hasher.hash(password),
        )
        for _ in range(_SUFFIX_ATTEMPTS):
            try:
                user = self._users.create(draft)
                break
            except UserAlreadyExistsError:
                if not self._username_taken(draft.username):
                    raise
                logger.info(f"account.register: username {draft.username} taken, adding suffix")
                draft = draft.with_username(_with_suffix(username_from_email(email)))
        else:
            user = self._users.create(draft)
        logger.info(f"account.register: created user_id={user.id}")
        self._dispatch(ActivationEmail(user_id=user.id, username=user.username, email=user.email))
        return user

    def notify_password_changed(self, user: User) -> None:
        self._dispatch(
            PasswordWasChanged(user_id=user.id, username=user.username, email=user.email)
        )

    def grant_feature(self, user: User, name: str) -> None:
        self._users.add_feature(Feature(user_id=user.id, name=name))
        logger.info(f"account.feature: granted user_id={user.id} feature={name}")

    def revoke_feature(self, user: User, name: str) -> None:
        self._users.remove_feature(Feature(user_id=user.id, name=name))
        logger.info(f"account.feature: revoked user_id={user.id} feature={name}")

    def _username_taken(self, username: str) -> bool:
        try:
            self._users.get_by_username(username)
        except UserNotFoundError:
            return False
        return True

    def _dispatch(self, notification: Notification) -> None:
        # The primary operation has already committed; a failed hand-off is logged only.
        try:
            accepted = self._notifications.dispatch(notification)
        except Exception:
            logger.exception(
                f"account.notify: dispatch failed kind={notification.kind} "
                f"user_id={notification.user_id}"
            )
            return
        if not accepted:
            logger.warning(
                f"account.notify: dropped kind={notification.kind} user_id={notification.user_id}"
            )
