# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import (
    ActivationEmail,
    Notification,
    NotificationDispatcher,
    NotificationSender,
    PasswordWasChanged,
)

__all__ = [
    "ActivationEmail",
    "Notification",
    "NotificationDispatcher",
    "NotificationSender",
    "PasswordWasChanged",
]
