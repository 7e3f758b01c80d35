"""Retry utilities with exponential backoff for batch operations."""

import asyncio
import inspect
import random
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from avif_optimizer.shared.logging import get_logger

logger = get_logger(__name__)


class RetryStrategy:
    """Configurable retry strategy."""

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        exponential: bool = True,
        jitter: bool = True,
        max_backoff: float = 60.0,
        exceptions: Tuple[Type[BaseException], ...] = (Exception,)
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.exponential = exponential
        self.jitter = jitter
        self.max_backoff = max_backoff
        self.exceptions = exceptions

    def calculate_backoff(self, attempt: int) -> float:
        """Calculate backoff time in seconds after the given failed attempt."""
        if self.exponential:
            wait_time = self.backoff_seconds * (2 ** (attempt - 1))
        else:
            wait_time = self.backoff_seconds * attempt

        wait_time = min(wait_time, self.max_backoff)

        if self.jitter:
            wait_time = wait_time * (0.5 + random.random())

        return wait_time


def with_retries(
    op: Callable[[Any], Any],
    strategy: Optional[RetryStrategy] = None
) -> Callable[[Any], Awaitable[Any]]:
    """
    Wrap a per-item operation so failed attempts are retried with backoff.

    The wrapped operation raises the last error once all attempts are used,
    which the batch scheduler then records as a failure for that item.

    Args:
        op: Sync or async callable taking one item
        strategy: Retry strategy (3 attempts, exponential backoff by default)

    Returns:
        Async callable taking one item
    """
    strategy = strategy or RetryStrategy()

    @wraps(op)
    async def wrapper(item):
        for attempt in range(1, strategy.max_attempts + 1):
            try:
                result = op(item)
                if inspect.isawaitable(result):
                    result = await result
                return result
            except strategy.exceptions as e:
                if attempt == strategy.max_attempts:
                    raise
                wait_time = strategy.calculate_backoff(attempt)
                logger.debug(f"Attempt {attempt}/{strategy.max_attempts} for {item} failed: {e}; retrying in {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper
