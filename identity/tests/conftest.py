from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from flask import Flask

from identity.application.interfaces import Notification
from identity.application.services.account_service import AccountService
from identity.application.services.tokens import JwtTokenIssuer
from identity.application.use_cases.users.change_password import ChangePasswordUseCase
from identity.application.use_cases.users.change_username import ChangeUsernameUseCase
from identity.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from identity.application.use_cases.users.login_user import LoginUserUseCase
from identity.application.use_cases.users.register_user import RegisterUserUseCase
from identity.domain.users.entities import Feature, User
from identity.domain.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from identity.domain.users.repositories import PasswordHasher, UserRepository
from identity.interfaces.http.auth import BearerAuth
from identity.interfaces.http.controllers.auth_controller import AuthController
from identity.interfaces.http.controllers.user_controller import UserController
from identity.shared.middleware.error_handler import configure_error_handling

SIGNING_KEY = "AToAQz1ZtiDFPd6S5O4lyPCixPpo5I58"


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._lock = threading.Lock()
        self.last_logins: list[tuple[UUID, str | None]] = []

    def _taken(self, user: User) -> bool:
        for other in self._users.values():
            if other.id == user.id:
                continue
            if other.username == user.username:
                return True
            if user.email is not None and other.email == user.email:
                return True
        return False

    def get_by_username(self, username: str) -> User:
        for user in self._users.values():
            if user.username == username:
                return user
        raise UserNotFoundError()

    def get_by_id(self, user_id: UUID) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise UserNotFoundError() from None

    def create(self, user: User) -> User:
        with self._lock:
            if user.id in self._users or self._taken(user):
                raise UserAlreadyExistsError()
            self._users[user.id] = user
        return user

    def change_username(self, user: User) -> User:
        with self._lock:
            current = self.get_by_id(user.id)
            if self._taken(user):
                raise UserAlreadyExistsError()
            updated = replace(current, username=user.username)
            self._users[user.id] = updated
        return updated

    def change_password(self, user: User) -> None:
        with self._lock:
            current = self.get_by_id(user.id)
            self._users[user.id] = replace(current, password_hash=user.password_hash)

    def update_last_login(self, user: User, address: str | None) -> None:
        with self._lock:
            current = self.get_by_id(user.id)
            self._users[user.id] = replace(
                current, last_login_at=datetime.now(UTC), last_login_ip=address
            )
            self.last_logins.append((user.id, address))

    def add_feature(self, feature: Feature) -> None:
        with self._lock:
            current = self.get_by_id(feature.user_id)
            self._users[feature.user_id] = replace(
                current, features=current.features | {feature.name}
            )

    def remove_feature(self, feature: Feature) -> None:
        with self._lock:
            current = self.get_by_id(feature.user_id)
            self._users[feature.user_id] = replace(
                current, features=current.features - {feature.name}
            )


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class RecordingDispatcher:
    def __init__(self, *, accept: bool = True, fail: bool = False) -> None:
        self.sent: list[Notification] = []
        self._accept = accept
        self._fail = fail

    def dispatch(self, notification: Notification) -> bool:
        if self._fail:
            raise RuntimeError("notification service unreachable")
        if self._accept:
            self.sent.append(notification)
        return self._accept


def seed_user(
    users: InMemoryUserRepository,
    username: str,
    password: str,
    *,
    ban_expiration: datetime | None = None,
    ban_reason: str | None = None,
) -> User:
    user = User.new(
        username=username,
        email=f"{username}@example.com",
        password_hash=DeterministicHasher().hash(password),
    )
    user = replace(user, ban_expiration=ban_expiration, ban_reason=ban_reason)
    return users.create(user)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture()
def signing_key() -> str:
    return SIGNING_KEY


@pytest.fixture()
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer(SIGNING_KEY, ttl=timedelta(minutes=15))


@pytest.fixture()
def accounts(
    users: InMemoryUserRepository,
    hasher: DeterministicHasher,
    token_issuer: JwtTokenIssuer,
    dispatcher: RecordingDispatcher,
) -> AccountService:
    return AccountService(
        users=users,
        password_hasher=hasher,
        tokens=token_issuer,
        notifications=dispatcher,
    )


@pytest.fixture()
def flask_app(
    users: InMemoryUserRepository,
    hasher: DeterministicHasher,
    token_issuer: JwtTokenIssuer,
    accounts: AccountService,
) -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)

    auth_controller = AuthController(
        register_use_case=RegisterUserUseCase(accounts=accounts),
        login_use_case=LoginUserUseCase(
            users=users, tokens=token_issuer, password_hasher=hasher
        ),
    )
    user_controller = UserController(
        auth=BearerAuth(GetCurrentUserUseCase(accounts=accounts)),
        change_username_use_case=ChangeUsernameUseCase(users=users),
        change_password_use_case=ChangePasswordUseCase(
            users=users, password_hasher=hasher, accounts=accounts
        ),
    )
    app.register_blueprint(auth_controller.as_blueprint())
    app.register_blueprint(user_controller.as_blueprint())
    return app


@pytest.fixture()
def seed(users: InMemoryUserRepository):
    def _seed(username: str, password: str, **ban: object) -> User:
        return seed_user(users, username, password, **ban)  # type: ignore[arg-type]

    return _seed


@pytest.fixture()
def plain_user(users: InMemoryUserRepository) -> User:
    return seed_user(users, "test", "test")


@pytest.fixture()
def banned_user(users: InMemoryUserRepository) -> User:
    return seed_user(
        users,
        "banned",
        "test",
        ban_expiration=datetime.now(UTC) + timedelta(days=365),
        ban_reason="banned",
    )
