# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Resilience utilities (retries, circuit breaker) for outbound delivery."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from identity.shared.logging import logger

T = TypeVar("T")


class CircuitOpenError(RuntimeError):
    pass


@dataclass
class CircuitBreaker:
    """Simple in-memory circuit breaker, shared by delivery worker threads."""

    failure_threshold: int
    reset_timeout: float
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None

    def allow(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return True
            if time.monotonic() - self._opened_at >= self.reset_timeout:
                logger.info("breaker: half-open state")
                self._opened_at = None
                self._failures = 0
                return True
        logger.warning("breaker: open state refusing call")
        return False

    def on_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None

    def on_failure(self) -> None:
        with self._lock:
            self._failures += 1
            opened = self._failures >= self.failure_threshold and self._opened_at is None
            if opened:
                self._opened_at = time.monotonic()
        if opened:
            logger.error("breaker: opening circuit after failures")


def resilient_call(  # noqa: UP047
    func: Callable[..., T],
    *args: Any,
    breaker: CircuitBreaker,
    max_retries: int,
    backoff_base: float,
    backoff_cap: float,
    **kwargs: Any,
) -> T:
    """Execute call with retries and a circuit breaker."""

    if not breaker.allow():
        msg = "Circuit breaker is open"
        raise CircuitOpenError(msg)

    retry = Retrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=backoff_base, max=backoff_cap),
        retry=retry_if_exception_type(Exception),
        reraise=True,
    )

    try:
        for attempt in retry:
            with attempt:
                logger.debug(
                    f"resilience: attempt={attempt.retry_state.attempt_number} "
                    f"func={getattr(func, '__name__', func)}"
                )
                result = func(*args, **kwargs)
                breaker.on_success()
                return result
    except RetryError as exc:
        breaker.on_failure()
        last_exc = exc.last_attempt.exception()
        if last_exc is None:
            raise RuntimeError("resilience: retry failed without exception") from exc
        raise last_exc from exc
    except Exception:
        breaker.on_failure()
        raise
    raise RuntimeError("resilience: reached unexpected branch")


__all__ = ["CircuitBreaker", "CircuitOpenError", "resilient_call"]
