# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from identity.application.interfaces import NotificationSender
from identity.application.services.account_service import AccountService
from identity.application.services.password_hashing import WerkzeugPasswordHasher
from identity.application.services.tokens import JwtTokenIssuer
from identity.application.use_cases.users.change_password import ChangePasswordUseCase
from identity.application.use_cases.users.change_username import ChangeUsernameUseCase
from identity.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from identity.application.use_cases.users.login_user import LoginUserUseCase
from identity.application.use_cases.users.register_user import RegisterUserUseCase
from identity.infrastructure.db import build_engine, build_session_factory
from identity.infrastructure.notifications import (
    ThreadPoolNotificationDispatcher,
    build_notification_sender,
)
from identity.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from identity.interfaces.http.auth import BearerAuth
from identity.interfaces.http.controllers.auth_controller import AuthController
from identity.interfaces.http.controllers.misc_controller import MiscController
from identity.interfaces.http.controllers.user_controller import UserController
from identity.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    @cached_property
    def engine(self) -> Engine:
        return build_engine(self.config.database)

    @cached_property
    def session_factory(self) -> sessionmaker[Session]:
        return build_session_factory(self.engine)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(
            method=self.config.hashing.method,
            salt_length=self.config.hashing.salt_length,
        )

    @cached_property
    def token_issuer(self) -> JwtTokenIssuer:
        auth = self.config.auth
        return JwtTokenIssuer(
            auth.jwt_secret,
            ttl=timedelta(seconds=auth.jwt_ttl_seconds),
            algorithm=auth.jwt_algorithm,
            issuer=auth.jwt_issuer,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.session_factory)

    @cached_property
    def notification_sender(self) -> NotificationSender:
        return build_notification_sender(self.config.notifications)

    @cached_property
    def notification_dispatcher(self) -> ThreadPoolNotificationDispatcher:
        return ThreadPoolNotificationDispatcher(
            self.notification_sender,
            workers=self.config.notifications.workers,
            max_pending=self.config.notifications.max_pending,
        )

    @cached_property
    def account_service(self) -> AccountService:
        return AccountService(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            tokens=self.token_issuer,
            notifications=self.notification_dispatcher,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(accounts=self.account_service)

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            tokens=self.token_issuer,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def change_username_use_case(self) -> ChangeUsernameUseCase:
        return ChangeUsernameUseCase(users=self.user_repository)

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            accounts=self.account_service,
        )

    @cached_property
    def get_current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(accounts=self.account_service)

    @cached_property
    def bearer_auth(self) -> BearerAuth:
        return BearerAuth(self.get_current_user_use_case)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
        )

    @cached_property
    def user_controller(self) -> UserController:
        return UserController(
            auth=self.bearer_auth,
            change_username_use_case=self.change_username_use_case,
            change_password_use_case=self.change_password_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(engine=self.engine)

    def shutdown(self) -> None:
        if "notification_dispatcher" in self.__dict__:
            self.notification_dispatcher.shutdown(wait=True)
        # senders holding a connection pool (httpx) expose close()
        close = getattr(self.__dict__.get("notification_sender"), "close", None)
        if callable(close):
            close()
        if "engine" in self.__dict__:
            self.engine.dispose()
