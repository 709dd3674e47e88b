"""
Retry mechanism for async operations.

Crumb acquisition does not retry by default; a failure surfaces immediately and
the next logical request pays for a fresh attempt. This helper is the opt-in
policy for callers that prefer a bounded number of fixed-delay attempts.
"""

import asyncio
from typing import Any, Callable, Coroutine, Optional, Tuple, Type, TypeVar

from ...core.errors import APIError, MaxRetriesReachedError, format_error_details
from ...core.logging import get_logger


T = TypeVar("T")

logger = get_logger(__name__)


async def retry_async(
    func: Callable[..., Coroutine[Any, Any, T]],
    *args: Any,
    max_attempts: int = 10,
    delay: float = 1.0,
    retry_exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
    **kwargs: Any,
) -> T:
    """
    Call an async function until it succeeds or the attempts are spent.

    Args:
        func: Async function to call
        *args: Positional arguments for function
        max_attempts: Total number of attempts, including the first one
        delay: Fixed delay in seconds between attempts
        retry_exceptions: Exceptions that trigger another attempt (default: APIError)
        **kwargs: Keyword arguments for function

    Returns:
        Result of the function

    Raises:
        MaxRetriesReachedError: If every attempt failed with a retryable error
        Exception: Any non-retryable error, unchanged
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    if retry_exceptions is None:
        retry_exceptions = (APIError,)

    attempt = 0
    while True:
        attempt += 1
        try:
            return await func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except retry_exceptions as e:  # type: ignore[misc]
            if attempt >= max_attempts:
                logger.warning(f"Giving up after {attempt} attempts: {format_error_details(e)}")
                raise MaxRetriesReachedError(attempt, e) from e

            logger.debug(
                f"Attempt {attempt}/{max_attempts} failed: {format_error_details(e)}. "
                f"Waiting {delay:.2f}s"
            )
            await asyncio.sleep(delay)
