"""Retry utilities for workout saves with exponential backoff."""
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from workout_runner.errors import TransportError


logger = logging.getLogger(__name__)

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_MIN_WAIT_SECONDS = 1
DEFAULT_MAX_WAIT_SECONDS = 30

# Statuses worth another attempt: timeouts, rate limits and server errors
RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if a failed save is worth retrying.

    Retryable errors include:
    - Network failures with no HTTP response (connection refused, DNS, reset)
    - Timeouts
    - Rate limit errors (429)
    - Server errors (5xx)

    Non-retryable errors include:
    - Client errors (400, 401, 403, 404, 409, 422): the same payload will be
      rejected again, so it waits for the next change instead
    - Request errors that are not about the connection (bad URL, undecodable
      body, too many redirects)
    """
    if not isinstance(exception, TransportError):
        return False

    if exception.status_code is not None:
        return exception.status_code in RETRYABLE_STATUS_CODES or exception.status_code >= 500

    cause = exception.__cause__
    if isinstance(cause, httpx.HTTPError):
        # Timeouts, connect/read/write failures and protocol errors
        return isinstance(cause, httpx.TransportError) and not isinstance(cause, httpx.UnsupportedProtocol)

    return True


def backoff_delay(
    attempt: int,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
) -> float:
    """Wait before retry number ``attempt`` (1-based): doubles up to the cap."""
    return min(min_wait_seconds * (2 ** (attempt - 1)), max_wait_seconds)


def create_async_retrying(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> AsyncRetrying:
    """
    Create an async retry controller with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts
        min_wait_seconds: Wait after the first failure
        max_wait_seconds: Maximum wait time between attempts
        sleep: Coroutine used to wait between attempts (defaults to asyncio.sleep)

    Returns:
        An AsyncRetrying instance that re-raises the last error when exhausted
    """
    kwargs: dict[str, Any] = {
        "retry": retry_if_exception(is_retryable_error),
        "stop": stop_after_attempt(max_attempts),
        "wait": wait_exponential(
            multiplier=min_wait_seconds,
            min=min_wait_seconds,
            max=max_wait_seconds,
        ),
        "before_sleep": before_sleep_log(logger, logging.WARNING),
        "reraise": True,
    }
    if sleep is not None:
        kwargs["sleep"] = sleep
    return AsyncRetrying(**kwargs)
