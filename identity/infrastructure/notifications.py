# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Notification delivery adapters.

Composition and channel delivery of emails live in a separate service;
this module only hands notices to it, in the background.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from identity.application.interfaces import (
    Notification,
    NotificationDispatcher,
    NotificationSender,
)
from identity.infrastructure.resilience import CircuitBreaker, resilient_call
from identity.shared.config.settings import NotificationConfig
from identity.shared.logging import get_correlation_id, logger, set_correlation_id


class LoggingNotificationSender(NotificationSender):

    def send(self, notification: Notification) -> None:
        logger.info(
            f"notify: {notification.kind} user_id={notification.user_id} "
            f"username={notification.username}"
        )


class HttpNotificationSender(NotificationSender):
    """POSTs each notice as JSON to the notification service."""

    def __init__(self, url: str, config: NotificationConfig, *, client: httpx.Client | None = None):
        self._url = url
        self._config = config
        self._client = client or httpx.Client(timeout=config.timeout)
        self._breaker = CircuitBreaker(
            failure_threshold=config.circuit_fail_threshold,
            reset_timeout=config.circuit_reset_timeout,
        )

    def send(self, notification: Notification) -> None:
        resilient_call(
            self._post,
            notification,
            breaker=self._breaker,
            max_retries=self._config.max_retries,
            backoff_base=self._config.backoff_base,
            backoff_cap=self._config.backoff_cap,
        )

    def _post(self, notification: Notification) -> None:
        response = self._client.post(
            self._url,
            json=notification.to_payload(),
            headers={"X-Request-ID": get_correlation_id()},
        )
        response.raise_for_status()

    def close(self) -> None:
        self._client.close()


class ThreadPoolNotificationDispatcher(NotificationDispatcher):
    """Fire-and-forget dispatcher backed by a bounded thread pool.

    ``dispatch`` never blocks on delivery. At most ``max_pending`` notices
    are queued or running; beyond that new notices are dropped and
    ``dispatch`` returns False.
    """

    def __init__(self, sender: NotificationSender, *, workers: int = 2, max_pending: int = 100):
        self._sender = sender
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify")
        self._slots = threading.BoundedSemaphore(max_pending)
        self._closed = False

    def dispatch(self, notification: Notification) -> bool:
        if self._closed:
            logger.warning(f"notify: dispatcher closed, dropping {notification.kind}")
            return False
        if not self._slots.acquire(blocking=False):
            logger.warning(
                f"notify: queue full, dropping {notification.kind} user_id={notification.user_id}"
            )
            return False

        correlation_id = get_correlation_id()
        try:
            future = self._executor.submit(self._deliver, notification, correlation_id)
        except RuntimeError:
            self._slots.release()
            logger.warning(f"notify: executor shut down, dropping {notification.kind}")
            return False
        future.add_done_callback(self._release)
        return True

    def _deliver(self, notification: Notification, correlation_id: str) -> None:
        set_correlation_id(correlation_id)
        try:
            self._sender.send(notification)
            logger.debug(f"notify: delivered {notification.kind} user_id={notification.user_id}")
        except Exception:
            logger.exception(
                f"notify: delivery failed {notification.kind} user_id={notification.user_id}"
            )

    def _release(self, _future: Future) -> None:
        self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)


def build_notification_sender(config: NotificationConfig) -> NotificationSender:
    if config.url:
        return HttpNotificationSender(config.url, config)
    return LoggingNotificationSender()


__all__ = [
    "HttpNotificationSender",
    "LoggingNotificationSender",
    "ThreadPoolNotificationDispatcher",
    "build_notification_sender",
]
