"""Retry policy implementation."""

from __future__ import annotations

import asyncio
import random
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from nodeweave.errors.exceptions import NodeWeaveError


class RetryStrategy(str, Enum):
    """Retry delay strategy."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


T = TypeVar("T")


class RetryPolicy:
    """Configurable retry policy for resilient operations.

    Errors are retried when they are NodeWeaveErrors flagged ``retryable``
    or instances of ``retryable_errors``.

    Example:
        >>> policy = RetryPolicy(max_retries=2, base_delay=0.5, backoff_multiplier=3)
        >>> policy.get_delay(1)
        1.5
        >>> result = await policy.execute(send_request, request)
    """

    def __init__(
        self,
        max_retries: int = 3,
        strategy: RetryStrategy = RetryStrategy.EXPONENTIAL,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_multiplier: float = 2.0,
        jitter: bool = True,
        jitter_factor: float = 0.1,
        retryable_errors: tuple[type[Exception], ...] = (),
        on_retry: Callable[[Exception, int, float], None] | None = None,
    ) -> None:
        """Initialize retry policy.

        Args:
            max_retries: Maximum number of retry attempts.
            strategy: Delay calculation strategy.
            base_delay: Delay before the first retry, in seconds. May be zero.
            max_delay: Maximum delay cap in seconds.
            backoff_multiplier: Growth factor for the exponential strategy.
            jitter: Whether to add random jitter to delays.
            jitter_factor: Jitter as fraction of delay (0.0-1.0).
            retryable_errors: Extra exception types to retry on.
            on_retry: Called with (error, retry number, delay) before sleeping.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if max_delay < base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

        self._max_retries = max_retries
        self._strategy = strategy
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._backoff_multiplier = backoff_multiplier
        self._jitter = jitter
        self._jitter_factor = jitter_factor
        self._retryable_errors = retryable_errors
        self._on_retry = on_retry

    @property
    def max_retries(self) -> int:
        """Maximum retry attempts."""
        return self._max_retries

    @property
    def strategy(self) -> RetryStrategy:
        """Retry strategy."""
        return self._strategy

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt number.

        Args:
            attempt: Attempt number (0-indexed, 0 is first retry).

        Returns:
            Delay in seconds.
        """
        if self._strategy == RetryStrategy.FIXED:
            delay = self._base_delay
        elif self._strategy == RetryStrategy.EXPONENTIAL:
            delay = self._base_delay * (self._backoff_multiplier ** attempt)
        elif self._strategy == RetryStrategy.LINEAR:
            delay = self._base_delay * (attempt + 1)
        else:
            delay = self._base_delay

        delay = min(delay, self._max_delay)

        if self._jitter:
            jitter_range = delay * self._jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
            delay = max(0.0, delay)

        return delay

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Determine if operation should be retried.

        Args:
            error: The exception that occurred.
            attempt: Current attempt number (0-indexed).
        """
        if attempt >= self._max_retries:
            return False

        if isinstance(error, NodeWeaveError) and error.retryable:
            return True
        return bool(self._retryable_errors) and isinstance(error, self._retryable_errors)

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Execute function with retry logic.

        Raises:
            Exception: The last exception if all retries exhausted.
        """
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if not self.should_retry(e, attempt):
                    raise
                delay = self.get_delay(attempt)
                if self._on_retry is not None:
                    self._on_retry(e, attempt + 1, delay)
                await asyncio.sleep(delay)
                attempt += 1
