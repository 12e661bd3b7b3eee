"""Retry utility with exponential backoff for lyric provider requests."""

import time
from functools import wraps
from typing import Callable, TypeVar, Any, Optional, Type, Tuple

from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Default retry settings
DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 8.0  # seconds
DEFAULT_BACKOFF_FACTOR = 2.0

# Error fragments that indicate a temporary condition on the provider side
TRANSIENT_MARKERS = (
    "connection",
    "timeout",
    "timed out",
    "temporarily",
    "rate limit",
    "remote end closed",
    "429",
    "502",
    "503",
    "504",
)


def is_transient_error(error: BaseException) -> bool:
    """Return True if retrying the failed call may succeed."""
    message = f"{type(error).__name__}: {error}".lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def retry_with_backoff(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    should_retry: Callable[[Exception], bool] = is_transient_error,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator that retries a function with exponential backoff.

    Only errors for which ``should_retry`` returns True are retried;
    anything else is raised immediately.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for delay after each retry
        exceptions: Tuple of exception types to catch and retry
        should_retry: Predicate deciding whether a caught error is retried
        sleep: Sleep function (replaced in tests)

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = getattr(func, "__name__", repr(func))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Optional[Exception] = None
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt < max_retries and should_retry(e):
                        logger.debug(
                            f"Retry {attempt + 1}/{max_retries} for {name} "
                            f"in {delay:.1f}s: {e}"
                        )
                        sleep(delay)
                        delay = min(delay * backoff_factor, max_delay)
                        continue

                    if attempt >= max_retries:
                        logger.warning(
                            f"All {max_retries} retries exhausted for {name}: {e}"
                        )
                    raise

            # Only reachable with max_retries < 0
            if last_exception:
                raise last_exception
            raise RuntimeError("Unexpected state in retry logic")

        return wrapper
    return decorator
