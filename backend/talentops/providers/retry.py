"""Retry helper for collaborator calls.

Identity provisioning, welcome delivery and profile extraction all go
through with_retries(). Transient and rate-limit failures are retried with
exponential backoff plus up to 10% jitter; a Retry-After hint replaces the
computed delay. Both are capped at retry_max_delay_ms.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from talentops.providers.errors import RateLimitError, TransientError

__all__ = ["with_retries"]

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE: tuple[type[Exception], ...] = (TransientError, RateLimitError)


def _backoff_seconds(error: Exception, attempt: int, config: "ProviderConfig") -> float:
    cap = config.retry_max_delay_ms / 1000
    if isinstance(error, RateLimitError) and error.retry_after_seconds:
        return min(error.retry_after_seconds, cap)
    delay_ms = config.retry_base_delay_ms * (2**attempt)
    delay_ms += random.uniform(0, delay_ms * 0.1)  # nosec B311
    return min(delay_ms / 1000, cap)


async def with_retries(
    func: Callable[[], Awaitable[T]],
    config: "ProviderConfig",
    retryable_errors: tuple[type[Exception], ...] = _RETRYABLE,
) -> T:
    """Await func(), retrying retryable failures up to config.max_retries times.

    Args:
        func: Zero-argument coroutine factory, called once per attempt.
        config: Supplies max_retries and the backoff bounds.
        retryable_errors: Exception types worth another attempt.

    Returns:
        Whatever func() returns on its first successful attempt.

    Raises:
        Exception: The last retryable error once attempts run out, or any
            other error immediately.
    """
    attempt = 0
    while True:
        try:
            return await func()
        except retryable_errors as e:
            if attempt >= config.max_retries:
                raise
            delay = _backoff_seconds(e, attempt, config)
            attempt += 1
            logger.warning(
                "Collaborator call failed (attempt %d of %d): %s; retrying in %.2fs",
                attempt,
                config.max_retries + 1,
                e,
                delay,
            )
            await asyncio.sleep(delay)
