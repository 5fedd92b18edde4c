# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        class_code = getattr(type(self), "code", None)
        class_status = getattr(type(self), "status", None)
        resolved_code = code or (class_code if isinstance(class_code, str) else "domain_error")
        resolved_status = status or (
            class_status if isinstance(class_status, HTTPStatus) else HTTPStatus.BAD_REQUEST
        )
        super().__init__(code=resolved_code, status=resolved_status, context=context)


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, context=context)

    def to_dict(self) -> dict[str, Any]:
        return {"error": "internal_error"}


class RepositoryError(InfrastructureError):
    def __init__(self, operation: str) -> None:
        super().__init__(code="repository_error", context={"operation": operation})


class BadRequestError(AppError):
    def __init__(
        self,
        code: str = "bad_request",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, status=HTTPStatus.BAD_REQUEST, context=context)


class ValidationError(BadRequestError):
    def __init__(
        self,
        code: str = "validation_error",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code, context=context)


class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(code="unauthenticated", status=HTTPStatus.UNAUTHORIZED)


class UnauthorizedError(AppError):
    def __init__(self, code: str = "wrong_password") -> None:
        super().__init__(code=code, status=HTTPStatus.UNAUTHORIZED)


class ConflictError(AppError):
    def __init__(
        self,
        code: str = "conflict",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, status=HTTPStatus.CONFLICT, context=context)
