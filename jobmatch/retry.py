"""
Retry with exponential backoff for storage writes.

SQLite answers concurrent writers with "database is locked"; those calls
are worth repeating after a short pause, schema or constraint errors are
not.
"""

import functools
import time
from typing import Callable, Optional, Tuple, Type

TRANSIENT_MARKERS = (
    "database is locked",
    "database table is locked",
    "deadlock",
    "lock timeout",
    "timeout",
    "could not connect",
    "connection reset",
    "connection refused",
    "server closed the connection",
    "disk i/o error",
)


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


def backoff_delays(max_retries: int, base_delay: float, max_delay: float, exponential_base: float):
    """Pause before each retry: base, base*k, base*k^2, ... capped at max_delay."""
    return [min(base_delay * exponential_base ** n, max_delay) for n in range(max_retries)]


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    retry_if: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Growth factor of the delay
        exceptions: Exception types that may be retried
        retry_if: Optional predicate; a caught exception for which it returns
            False is re-raised immediately
        on_retry: Optional callback function(attempt, exception, delay)

    Raises:
        RetryError: After the last attempt fails, chained to its exception

    Example:
        @exponential_backoff(max_retries=3, base_delay=0.1, exceptions=(OperationalError,),
                             retry_if=is_transient_error)
        def persist(session, row):
            session.add(row)
            session.commit()
    """
    delays = backoff_delays(max_retries, base_delay, max_delay, exponential_base)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        raise
                    if attempt >= len(delays):
                        raise RetryError(f"Failed after {attempt + 1} attempts: {e}") from e
                    delay = delays[attempt]
                    attempt += 1
                    if on_retry:
                        on_retry(attempt, e, delay)
                    time.sleep(delay)

        return wrapper
    return decorator


def is_transient_error(exception: Exception) -> bool:
    """True for lock contention, timeouts and dropped connections."""
    message = str(exception).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)
