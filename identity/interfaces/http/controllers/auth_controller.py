# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from identity.application.use_cases.users.login_user import LoginUserUseCase
from identity.application.use_cases.users.register_user import RegisterUserUseCase
from identity.domain.users.exceptions import AccountBannedError, InvalidCredentialsError
from identity.infrastructure.audit import AuditAction, audit_log
from identity.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    LoginRequestDTO,
    RegisterRequestDTO,
    TokenResponseDTO,
)
from identity.shared.errors import BadRequestError
from identity.shared.errors.validation import raise_validation_error
from identity.shared.logging import logger
from identity.shared.middleware.request_logger import get_client_ip


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BadRequestError()
    return payload


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case

    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._register_use_case.execute(str(dto.email), dto.password)

        audit_log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=get_client_ip(),
            details={"username": user.username},
            success=True,
        )
        logger.info(f"auth.register: ok user_id={user.id}")
        return jsonify(AuthSuccessDTO().model_dump()), 201

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = get_client_ip()

        try:
            token = self._login_use_case.execute(dto.username, dto.password, ip_address)
        except AccountBannedError:
            audit_log(
                AuditAction.LOGIN_BANNED,
                ip_address=ip_address,
                details={"username": dto.username},
                success=False,
            )
            raise
        except InvalidCredentialsError:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"username": dto.username},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            ip_address=ip_address,
            details={"username": dto.username},
            success=True,
        )
        logger.info(f"auth.login: ok username={dto.username}")
        return jsonify(TokenResponseDTO(token=token).model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        return bp
