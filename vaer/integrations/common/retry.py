"""Retry utilities with exponential backoff for API clients."""

import asyncio
import random
from collections.abc import Awaitable, Callable

import httpx
import structlog

logger = structlog.get_logger()

# A user is waiting on the widget, so keep the total delay short
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 0.5
MAX_BACKOFF_SECONDS = 4.0
BACKOFF_MULTIPLIER = 2.0
JITTER_FACTOR = 0.5


def calculate_backoff(attempt: int) -> float:
    """Calculate backoff delay with exponential increase and jitter."""
    backoff = INITIAL_BACKOFF_SECONDS * (BACKOFF_MULTIPLIER**attempt)
    backoff = min(backoff, MAX_BACKOFF_SECONDS)
    jitter = random.uniform(0, JITTER_FACTOR * backoff)
    return backoff + jitter


def is_retryable_error(exc: Exception) -> bool:
    """Transport failures and 5xx responses are worth another attempt."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500:
        return True
    return False


async def with_retry[T](
    operation: Callable[[], Awaitable[T]],
    *,
    operation_name: str = "request",
    max_retries: int = MAX_RETRIES,
) -> T:
    """
    Execute an async operation with retry and exponential backoff.

    Non-retryable errors are raised immediately. When all attempts are
    exhausted the last exception is raised.
    """
    last_exception: Exception | None = None

    for attempt in range(max_retries):
        try:
            return await operation()
        except Exception as exc:
            last_exception = exc
            if not is_retryable_error(exc):
                raise

            if attempt + 1 == max_retries:
                break

            backoff = calculate_backoff(attempt)
            logger.warning(
                "Retryable error occurred, backing off",
                operation=operation_name,
                attempt=attempt + 1,
                max_retries=max_retries,
                backoff_seconds=round(backoff, 2),
                error=str(exc),
            )
            await asyncio.sleep(backoff)

    assert last_exception is not None
    raise last_exception
