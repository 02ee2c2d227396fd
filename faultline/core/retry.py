"""Bounded retry with a constant delay and exception-class filtering.

Each call tracks its own attempt counter; nothing is shared between
invocations. An operation runs ``max_attempts`` times at most. Failures that
do not match ``retry_on`` propagate unchanged after that single attempt.
Cancellation is only observed while waiting between attempts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from collections.abc import Callable
import logging
import threading
import time
from typing import TypeVar

T = TypeVar("T")

RetryOn = type[BaseException] | tuple[type[BaseException], ...]

logger = logging.getLogger(__name__)


class RetryExhaustedError(RuntimeError):
    """Raised when every attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Operation failed after {attempts} attempts")
        self.attempts = attempts
        self.last_error = last_error
        self.__cause__ = last_error


class RetryCancelledError(RuntimeError):
    """Raised when the cancel signal is set while waiting between attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Retry cancelled after {attempts} attempts")
        self.attempts = attempts


def execute_with_retry(
    operation: Callable[[], T],
    max_attempts: int,
    delay: float,
    retry_on: RetryOn | None = None,
    *,
    sleep_fn: Callable[[float], None] = time.sleep,
    cancel_event: threading.Event | None = None,
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    ``delay`` is in seconds and constant across attempts. When ``cancel_event``
    is given the wait is ``cancel_event.wait(delay)`` instead of ``sleep_fn``,
    and a set event raises ``RetryCancelledError``.
    """
    _validate(max_attempts, delay)

    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            if not _is_retryable(exc, retry_on):
                logger.error(
                    "Attempt %d raised non-retryable %s, not retrying: %s", attempt, type(exc).__name__, exc
                )
                raise
            if attempt >= max_attempts:
                logger.error("All %d retry attempts failed", max_attempts)
                raise RetryExhaustedError(attempt, exc) from exc
            logger.warning("Attempt %d failed, retrying in %.3fs: %s", attempt, delay, exc)

        if cancel_event is None:
            sleep_fn(delay)
        elif cancel_event.wait(delay):
            logger.info("Retry cancelled after %d attempts", attempt)
            raise RetryCancelledError(attempt)


def run_with_retry(
    operation: Callable[[], object],
    max_attempts: int,
    delay: float,
    retry_on: RetryOn | None = None,
    *,
    sleep_fn: Callable[[float], None] = time.sleep,
    cancel_event: threading.Event | None = None,
) -> None:
    """Retry an operation whose return value is not needed."""

    def _call() -> None:
        operation()

    execute_with_retry(
        _call,
        max_attempts,
        delay,
        retry_on,
        sleep_fn=sleep_fn,
        cancel_event=cancel_event,
    )


async def execute_with_retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    delay: float,
    retry_on: RetryOn | None = None,
) -> T:
    """Coroutine variant of ``execute_with_retry``.

    Cancelling the calling task while it waits between attempts re-raises
    ``asyncio.CancelledError`` and no further attempts are made.
    """
    _validate(max_attempts, delay)

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            if not _is_retryable(exc, retry_on):
                logger.error(
                    "Attempt %d raised non-retryable %s, not retrying: %s", attempt, type(exc).__name__, exc
                )
                raise
            if attempt >= max_attempts:
                logger.error("All %d retry attempts failed", max_attempts)
                raise RetryExhaustedError(attempt, exc) from exc
            logger.warning("Attempt %d failed, retrying in %.3fs: %s", attempt, delay, exc)

        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.info("Retry cancelled after %d attempts", attempt)
            raise


def _validate(max_attempts: int, delay: float) -> None:
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if delay < 0:
        raise ValueError("delay must be >= 0")


def _is_retryable(exc: Exception, retry_on: RetryOn | None) -> bool:
    return retry_on is None or isinstance(exc, retry_on)
