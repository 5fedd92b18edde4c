# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g, request

from identity.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from identity.shared.errors import UnauthenticatedError
from identity.shared.logging import logger


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


class BearerAuth:
    """Resolves ``Authorization: Bearer <token>`` to the calling account."""

    def __init__(self, current_user: GetCurrentUserUseCase) -> None:
        self._current_user = current_user

    def required(self, f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def inner(*a: Any, **kw: Any) -> Any:
            token = bearer_token()
            if not token:
                logger.info(f"No bearer token on {request.method} {request.path}")
                raise UnauthenticatedError()

            user = self._current_user.execute(token)
            g.user_id = user.id
            kw["user"] = user
            return f(*a, **kw)

        return inner
