"""Retry utility with exponential backoff.

retry_with_backoff() runs an async operation up to max_attempts times and
reports the outcome instead of raising. is_retryable_error() classifies an
error by its message text so callers can tell transient failures apart.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Substrings (matched case-insensitively) that mark an error as transient
RETRYABLE_ERROR_PATTERNS: tuple[str, ...] = (
    "ECONNRESET",
    "ETIMEDOUT",
    "ENOTFOUND",
    "ECONNREFUSED",
    "Network request failed",
    "timeout",
    "rate limit",
    "too many requests",
    "503",
    "502",
    "504",
)


@dataclass
class RetryOutcome:
    """Result of a retry_with_backoff() call."""

    success: bool
    attempts: int
    result: Any = None
    error: Exception | None = None


async def retry_with_backoff(
    operation: Callable[[], Awaitable[Any]],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_multiplier: float = 2.0,
    on_retry: Callable[[int, Exception], None] | None = None,
) -> RetryOutcome:
    """Run an async operation with exponential backoff between failures.

    The delay before attempt n+1 is initial_delay * backoff_multiplier^(n-1).
    There is no delay before the first attempt or after the last one.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_attempts: Maximum number of invocations (default 3).
        initial_delay: Delay in seconds after the first failure (default 1.0).
        backoff_multiplier: Growth factor for each following delay (default 2).
        on_retry: Optional hook called with (attempt, error) for each failed
            attempt that will be retried. Not called on the exhausting failure.

    Returns:
        RetryOutcome with the result on success, or the last error and
        attempts == max_attempts once all attempts failed.

    Raises:
        ValueError: If max_attempts is less than 1.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()
            return RetryOutcome(success=True, attempts=attempt, result=result)
        except Exception as exc:
            last_error = exc
            if attempt == max_attempts:
                break

            if on_retry is not None:
                on_retry(attempt, exc)

            delay = initial_delay * (backoff_multiplier ** (attempt - 1))
            logger.warning(
                "Retry %d/%d after %.1fs: %s",
                attempt,
                max_attempts - 1,
                delay,
                exc,
            )
            await asyncio.sleep(delay)

    return RetryOutcome(success=False, attempts=max_attempts, error=last_error)


def is_retryable_error(error: BaseException) -> bool:
    """Return True if the error message looks like a transient failure.

    Matches network errors, timeouts, rate limiting, and 502/503/504
    responses. Validation, auth, and 404 errors are not retryable.
    """
    message = str(error).lower()
    return any(pattern.lower() in message for pattern in RETRYABLE_ERROR_PATTERNS)


async def retry_if_retryable(
    operation: Callable[[], Awaitable[Any]],
    **options: Any,
) -> RetryOutcome:
    """Retry an operation only when its first failure is retryable.

    The first attempt runs once. A non-retryable failure is returned
    immediately with attempts == 1; a retryable one hands the operation
    over to retry_with_backoff() with the given options.
    """
    try:
        result = await operation()
        return RetryOutcome(success=True, attempts=1, result=result)
    except Exception as exc:
        if not is_retryable_error(exc):
            return RetryOutcome(success=False, attempts=1, error=exc)

    return await retry_with_backoff(operation, **options)
