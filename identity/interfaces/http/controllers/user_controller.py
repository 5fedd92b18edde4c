# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify
from pydantic import ValidationError

from identity.application.use_cases.users.change_password import ChangePasswordUseCase
from identity.application.use_cases.users.change_username import ChangeUsernameUseCase
from identity.domain.users.entities import User
from identity.domain.users.exceptions import UserNotFoundError
from identity.infrastructure.audit import AuditAction, audit_log
from identity.interfaces.http.auth import BearerAuth
from identity.interfaces.http.controllers.auth_controller import json_body
from identity.interfaces.http.dto.auth import AuthSuccessDTO
from identity.interfaces.http.dto.user import ChangePasswordRequestDTO, ChangeUsernameRequestDTO
from identity.shared.errors import UnauthenticatedError, UnauthorizedError
from identity.shared.errors.validation import raise_validation_error
from identity.shared.logging import logger
from identity.shared.middleware.request_logger import get_client_ip


def _account_gone(user: User) -> UnauthenticatedError:
    # the token resolved, but the account was removed before the update
    logger.info(f"user: account vanished mid-request user_id={user.id}")
    return UnauthenticatedError()


class UserController:
    def __init__(
        self,
        *,
        auth: BearerAuth,
        change_username_use_case: ChangeUsernameUseCase,
        change_password_use_case: ChangePasswordUseCase,
    ) -> None:
        self._auth = auth
        self._change_username_use_case = change_username_use_case
        self._change_password_use_case = change_password_use_case

    def get(self, *, user: User) -> tuple[Response, int]:
        return jsonify({"user": user.to_public_dict()}), 200

    def change_username(self, *, user: User) -> tuple[Response, int]:
        try:
            dto = ChangeUsernameRequestDTO.model_validate(json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        try:
            updated = self._change_username_use_case.execute(user, dto.username)
        except UserNotFoundError as exc:
            raise _account_gone(user) from exc
        audit_log(
            AuditAction.USERNAME_CHANGED,
            user_id=user.id,
            ip_address=get_client_ip(),
            details={"from": user.username, "to": updated.username},
        )
        return jsonify({"user": updated.to_public_dict()}), 200

    def change_password(self, *, user: User) -> tuple[Response, int]:
        try:
            dto = ChangePasswordRequestDTO.model_validate(json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        try:
            self._change_password_use_case.execute(user, dto.password, dto.new_password)
        except UnauthorizedError:
            audit_log(
                AuditAction.PASSWORD_CHANGE_FAILED,
                user_id=user.id,
                ip_address=get_client_ip(),
                success=False,
            )
            raise
        except UserNotFoundError as exc:
            raise _account_gone(user) from exc

        audit_log(AuditAction.PASSWORD_CHANGED, user_id=user.id, ip_address=get_client_ip())
        return jsonify(AuthSuccessDTO().model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("user", __name__, url_prefix="/api/user")
        bp.add_url_rule("", view_func=self._auth.required(self.get), methods=["GET"])
        bp.add_url_rule(
            "/username",
            view_func=self._auth.required(self.change_username),
            methods=["PATCH"],
        )
        bp.add_url_rule(
            "/password",
            view_func=self._auth.required(self.change_password),
            methods=["PATCH"],
        )
        return bp
