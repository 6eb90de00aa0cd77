"""Retry with exponential backoff for async operations."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.5  # seconds


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Await ``operation`` until it succeeds or ``max_attempts`` is reached.

    The delay after failed attempt ``n`` is ``base_delay * 2 ** (n - 1)``.
    There is no sleep after a success or after the final failure.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_attempts: Upper bound on attempts, at least 1
        base_delay: Delay in seconds after the first failure
        retry_on: Exception types that trigger a retry; others propagate at once
        sleep: Awaitable sleep function, injectable for tests
        description: Label used in log messages

    Returns:
        The result of the first successful attempt.

    Raises:
        The exception from the final attempt once retries are exhausted.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as e:
            if attempt >= max_attempts:
                logger.warning(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = base_delay * 2 ** (attempt - 1)
            logger.debug(
                f"{description} failed (attempt {attempt}/{max_attempts}), "
                f"retrying in {delay:.2f}s: {e}"
            )
            await sleep(delay)
            attempt += 1
