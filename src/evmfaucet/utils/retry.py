"""
Retry Utilities for the faucet.

Provides exponential backoff with jitter for transient RPC failures, and
an optional error classifier that decides per exception whether to retry,
abort, or swallow it.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

T = TypeVar("T")


class RetryDecision(Enum):
    """Outcome of classifying a failed attempt."""

    RETRY = "retry"
    """Back off and try again (until attempts run out)."""

    ABORT = "abort"
    """Stop retrying and re-raise the error immediately."""

    IGNORE = "ignore"
    """Swallow the error and return None."""


ErrorClassifier = Callable[[BaseException], RetryDecision]


@dataclass(frozen=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=5,
            base_delay_ms=10,
            max_delay_ms=5000,
            classify=broadcast_policy,
        )
        ```
    """

    max_attempts: Optional[int] = 3
    """Maximum number of attempts. None retries until success."""

    base_delay_ms: int = 1000
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 30000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = True
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    """Exception types that trigger a retry when no classifier is set."""

    classify: Optional[ErrorClassifier] = None
    """Per-exception decision; takes precedence over retryable_errors."""


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    # Cap the exponent so unbounded retries never overflow a float
    exponent = min(attempt, 64)
    delay_ms = config.base_delay_ms * (config.exponential_base ** exponent)
    delay_ms = min(delay_ms, config.max_delay_ms)

    if config.jitter:
        # Full jitter: random value between 0 and calculated delay
        delay_ms = random.uniform(0, delay_ms)

    return delay_ms / 1000


def _decide(error: Exception, config: RetryConfig) -> RetryDecision:
    if config.classify is not None:
        return config.classify(error)
    if isinstance(error, config.retryable_errors):
        return RetryDecision.RETRY
    return RetryDecision.ABORT


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
) -> Optional[T]:
    """
    Execute async function with retry logic.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)

    Returns:
        Result of the function, or None if a failure was classified IGNORE

    Raises:
        The classified-ABORT error immediately, or the last error once
        all attempts are exhausted

    Example:
        ```python
        balance = await retry_async(
            lambda: rpc.get_balance(address),
            RetryConfig(max_attempts=None, base_delay_ms=10),
        )
        ```
    """
    config = config or RetryConfig()
    attempt = 0

    while True:
        try:
            return await fn()
        except Exception as e:
            decision = _decide(e, config)
            if decision is RetryDecision.IGNORE:
                return None
            if decision is RetryDecision.ABORT:
                raise

            attempt += 1
            if config.max_attempts is not None and attempt >= config.max_attempts:
                raise

            await asyncio.sleep(calculate_delay(attempt - 1, config))

