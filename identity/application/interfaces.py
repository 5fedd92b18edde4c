# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar, Protocol
from uuid import UUID


@dataclass(slots=True, frozen=True)
class ActivationEmail:
    kind: ClassVar[str] = "activation"

    user_id: UUID
    username: str
    email: str | None

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["user_id"] = str(self.user_id)
        payload["kind"] = self.kind
        return payload


@dataclass(slots=True, frozen=True)
class PasswordWasChanged:
    kind: ClassVar[str] = "password_changed"

    user_id: UUID
    username: str
    email: str | None
    changed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["user_id"] = str(self.user_id)
        payload["changed_at"] = self.changed_at.isoformat()
        payload["kind"] = self.kind
        return payload


Notification = ActivationEmail | PasswordWasChanged


class NotificationSender(Protocol):
    """Delivers one notice synchronously; raises on failure."""

    def send(self, notification: Notification) -> None: ...


class NotificationDispatcher(Protocol):
    """Accepts a notice for background delivery and returns immediately."""

    def dispatch(self, notification: Notification) -> bool: ...
