# utils/retry.py
"""
Retry helpers for transient failures in database and API calls.

Features:
- Bounded retries with exponential backoff (capped)
- Per-attempt callback for logging/metrics
- Last error re-raised unchanged once the budget is spent
- Advisory classification of transient errors
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from ..config import DEFAULT_INITIAL_DELAY, DEFAULT_MAX_DELAY, DEFAULT_MAX_RETRIES

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, BaseException], None]
SleepFunc = Callable[[float], Awaitable[None]]

RETRYABLE_MESSAGES = (
    "econnrefused",
    "econnreset",
    "etimedout",
    "enotfound",
    "network",
    "timeout",
    "timed out",
    "connection",
    "pgrst301",  # PostgREST timeout
    "pgrst504",  # gateway timeout
)

RETRYABLE_CODES = {"PGRST301", "PGRST504", "TIMEOUT"}


@dataclass
class RetryOptions:
    """Configuration for with_retry (delays in seconds)."""
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    exponential_backoff: bool = True
    max_delay: float = DEFAULT_MAX_DELAY
    on_retry: Optional[RetryCallback] = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be >= 0")

    def chained(self, callback: RetryCallback) -> "RetryOptions":
        """Copy of these options that also calls callback before each retry."""
        user_callback = self.on_retry

        def on_retry(attempt: int, error: BaseException) -> None:
            callback(attempt, error)
            if user_callback:
                user_callback(attempt, error)

        return replace(self, on_retry=on_retry)


def _wait_strategy(options: RetryOptions):
    if options.exponential_backoff:
        # initial_delay * 2 ** (attempt_number - 1), capped at max_delay
        return wait_exponential(multiplier=options.initial_delay, min=0, max=options.max_delay)
    return wait_fixed(options.initial_delay)


def _before_sleep(options: RetryOptions) -> Callable[[RetryCallState], None]:
    def callback(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.debug(
            f"Attempt {retry_state.attempt_number}/{options.max_retries + 1} failed "
            f"({type(error).__name__}); sleeping {delay:.2f}s"
        )
        if options.on_retry:
            options.on_retry(retry_state.attempt_number, error)

    return callback


def _awaiting(operation: Callable[[], Awaitable[T]]) -> Callable[[], Awaitable[T]]:
    # AsyncRetrying only awaits coroutine functions, not callables returning awaitables
    async def attempt() -> T:
        return await operation()

    return attempt


def _retrying(options: RetryOptions, retry, sleep: Optional[SleepFunc]) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(options.max_retries + 1),
        wait=_wait_strategy(options),
        retry=retry,
        before_sleep=_before_sleep(options),
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
    sleep: Optional[SleepFunc] = None,
) -> T:
    """
    Run an async operation, retrying every failure with backoff.

    Attempts run one after another; the caller is suspended between them.
    The executor never inspects the error, see with_conditional_retry.

    Args:
        operation: Zero-argument coroutine function to call
        options: Retry configuration (defaults: 3 retries, 1s initial, 10s cap)
        sleep: Awaitable sleep used between attempts (asyncio.sleep by default)

    Returns:
        Result of the first successful attempt

    Raises:
        The last error raised by the operation, unchanged
    """
    options = options or RetryOptions()
    retrying = _retrying(options, retry_if_exception_type(Exception), sleep)
    return await retrying(_awaiting(operation))


def is_retryable_error(error: BaseException) -> bool:
    """
    Determine if an error is likely transient and worth retrying.

    Args:
        error: The error to check

    Returns:
        True for timeouts, connection failures and PostgREST gateway errors
    """
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True

    code = getattr(error, "code", None)
    if isinstance(code, str) and code.upper() in RETRYABLE_CODES:
        return True

    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MESSAGES)


async def with_conditional_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
    sleep: Optional[SleepFunc] = None,
) -> T:
    """
    Like with_retry, but only errors accepted by is_retryable_error are retried.

    Any other error is re-raised on the attempt that produced it.
    """
    options = options or RetryOptions()
    retrying = _retrying(options, retry_if_exception(is_retryable_error), sleep)
    return await retrying(_awaiting(operation))
