"""Bounded retry with fixed backoff for transient failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

from rest_relay.core.errors import RetryableError

__all__ = ["retry_call", "RETRYABLE_ERRORS"]

logger = logging.getLogger(__name__)

# Exceptions considered transient and eligible for retry
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,  # Connection refused, DNS failure, payload errors
    asyncio.TimeoutError,  # Request exceeded its timeout
    RetryableError,  # Bad status or unusable response body
)

T = TypeVar("T")


async def retry_call(
    fn: Callable[[], Awaitable[T]],
    *,
    times: int,
    delay_sec: float,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
) -> T:
    """Await fn until it succeeds or the attempt budget is spent.

    Sleeps delay_sec between attempts but not after the last one.
    Errors outside retry_on are raised immediately.

    Args:
        fn: Zero-argument coroutine factory, called once per attempt.
        times: Number of attempts (1 = no retry).
        delay_sec: Fixed delay between attempts in seconds.
        retry_on: Exception types that trigger another attempt.

    Returns:
        Result of the first successful attempt.

    Raises:
        ValueError: If times < 1.
        BaseException: The last retryable error once attempts are exhausted.

    Example:
        token = await retry_call(fetch_once, times=10, delay_sec=5.0)
    """
    if times < 1:
        raise ValueError(f"times must be >= 1 (got: {times})")

    for attempt in range(1, times + 1):
        try:
            return await fn()
        except retry_on as e:
            if attempt == times:
                logger.debug(f"Retry exhausted after {times} attempts: {e}")
                raise
            logger.debug(f"Attempt {attempt}/{times} failed ({e}), retrying in {delay_sec}s")
            await asyncio.sleep(delay_sec)

    raise RuntimeError("Retry loop exhausted")  # pragma: no cover
