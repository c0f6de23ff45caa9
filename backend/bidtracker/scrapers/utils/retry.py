"""Retry utilities with exponential backoff for source fetches."""

import asyncio
from typing import Awaitable, Callable, TypeVar

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")


def is_transient_error(exc: BaseException) -> bool:
    """Return True for errors worth another attempt.

    Transport failures, timeouts and non-2xx statuses are transient.
    Domain errors (not found, bad payload) are not.
    """
    return isinstance(exc, (httpx.HTTPError, asyncio.TimeoutError))


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_attempt_failed",
        attempt=retry_state.attempt_number,
        retry_in_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=repr(exc),
    )


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    is_retryable: Callable[[BaseException], bool] = is_transient_error,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an async operation, retrying transient failures.

    The delay before retry k (k >= 1) is ``base_delay * 2 ** (k - 1)``.
    Non-retryable errors propagate immediately; when attempts run out the
    last error is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine function, called once per attempt
        max_attempts: Total attempts including the first
        base_delay: Delay before the first retry, in seconds
        is_retryable: Predicate deciding whether an error is retried
        sleep: Coroutine used to wait between attempts

    Returns:
        The operation's result
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, min=0),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_before_sleep,
        sleep=sleep,
        reraise=True,
    )
    return await retrying(operation)
