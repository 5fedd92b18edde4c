# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from identity.domain.users.entities import Feature, User
from identity.domain.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from identity.domain.users.repositories import UserRepository
from identity.infrastructure.db.models import UserFeatureModel, UserModel
from identity.infrastructure.db.session import session_scope
from identity.shared.errors import RepositoryError
from identity.shared.logging import logger


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(row: UserModel) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_aware(row.created_at) or datetime.now(UTC),
        activated_at=_aware(row.activated_at),
        ban_expiration=_aware(row.ban_expiration),
        ban_reason=row.ban_reason,
        last_login_at=_aware(row.last_login_at),
        last_login_ip=row.last_login_ip,
        features=frozenset(feature.name for feature in row.features),
    )


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        logger.info(f"users.{operation}: uniqueness violation")
        raise UserAlreadyExistsError() from exc
    except SQLAlchemyError as exc:
        logger.opt(exception=exc).error(f"users.{operation}: database failure")
        raise RepositoryError(operation) from exc


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_username(self, username: str) -> User:
        with _translate_errors("get_by_username"), session_scope(self._session_factory) as session:
            row = session.scalars(select(UserModel).where(UserModel.username == username)).first()
            if row is None:
                raise UserNotFoundError()
            return _to_domain(row)

    def get_by_id(self, user_id: UUID) -> User:
        with _translate_errors("get_by_id"), session_scope(self._session_factory) as session:
            row = session.get(UserModel, user_id)
            if row is None:
                raise UserNotFoundError()
            return _to_domain(row)

    def create(self, user: User) -> User:
        with _translate_errors("create"), session_scope(self._session_factory) as session:
            row = UserModel(
                id=user.id,
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                created_at=user.created_at,
                activated_at=user.activated_at,
                ban_expiration=user.ban_expiration,
                ban_reason=user.ban_reason,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return _to_domain(row)

    def change_username(self, user: User) -> User:
        with _translate_errors("change_username"), session_scope(self._session_factory) as session:
            row = self._require(session, user.id)
            row.username = user.username
            session.flush()
            return _to_domain(row)

    def change_password(self, user: User) -> None:
        with _translate_errors("change_password"), session_scope(self._session_factory) as session:
            row = self._require(session, user.id)
            row.password_hash = user.password_hash

    def update_last_login(self, user: User, address: str | None) -> None:
        with _translate_errors("update_last_login"), session_scope(
            self._session_factory
        ) as session:
            row = self._require(session, user.id)
            row.last_login_at = datetime.now(UTC)
            row.last_login_ip = address

    def add_feature(self, feature: Feature) -> None:
        try:
            with _translate_errors("add_feature"), session_scope(self._session_factory) as session:
                self._require(session, feature.user_id)
                exists = session.scalars(
                    select(UserFeatureModel.id).where(
                        UserFeatureModel.user_id == feature.user_id,
                        UserFeatureModel.name == feature.name,
                    )
                ).first()
                if exists is None:
                    session.add(UserFeatureModel(user_id=feature.user_id, name=feature.name))
        except UserAlreadyExistsError:
            # a concurrent grant of the same feature won the insert
            logger.debug(f"users.add_feature: already present feature={feature.name}")

    def remove_feature(self, feature: Feature) -> None:
        with _translate_errors("remove_feature"), session_scope(self._session_factory) as session:
            session.execute(
                delete(UserFeatureModel).where(
                    UserFeatureModel.user_id == feature.user_id,
                    UserFeatureModel.name == feature.name,
                )
            )

    @staticmethod
    def _require(session: Session, user_id: UUID) -> UserModel:
        row = session.get(UserModel, user_id)
        if row is None:
            raise UserNotFoundError()
        return row
