"""Retry logic with exponential backoff for transient I/O failures.

Writes and deletes on managed paths can fail briefly when another process
holds the file (editors, indexers, antivirus scanners). Only errors whose
errno marks them as transient are retried; anything else propagates on the
first attempt.
"""

import errno
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from kitsync.errors import TransientIOError
from kitsync.integrations.time import Time

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRNOS = frozenset(
    {
        errno.EBUSY,
        errno.EAGAIN,
        errno.ETXTBSY,
        errno.EACCES,
        errno.EPERM,
    }
)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.1


def is_transient(error: OSError) -> bool:
    return error.errno in TRANSIENT_ERRNOS


def retry_with_backoff(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    *,
    backoff_factor: float = 2.0,
    time: Time,
    label: str = "",
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a filesystem operation with exponential backoff.

    Delay before attempt n (n >= 2) is base_delay * backoff_factor ** (n - 2):
    with defaults 0.1s then 0.2s. Sleeping goes through `time` so tests can
    inject a fake clock.

    Args:
        max_attempts: Total attempts including the first
        base_delay: Delay before the second attempt, in seconds
        backoff_factor: Multiplier applied to each further delay
        time: Clock used for sleeping
        label: Path or description used in log and error messages

    Example:
        @retry_with_backoff(time=ctx.time, label=str(path))
        def write() -> None:
            fs.write_text(path, content)

        write()

    Raises:
        TransientIOError: If a transient error persists on the final attempt
        OSError: Non-transient errors, immediately
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = label or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_attempts):
                if attempt > 0:
                    delay = base_delay * (backoff_factor ** (attempt - 1))
                    logger.debug(
                        "Retrying %s after %.2fs (attempt %d/%d)",
                        name,
                        delay,
                        attempt + 1,
                        max_attempts,
                    )
                    time.sleep(delay)

                try:
                    return func(*args, **kwargs)
                except OSError as e:
                    if not is_transient(e):
                        raise
                    if attempt == max_attempts - 1:
                        raise TransientIOError(name, max_attempts, e) from e
                    logger.warning("Transient error on %s: %s", name, e)

            msg = f"{name}: max_attempts must be at least 1"
            raise ValueError(msg)

        return wrapper

    return decorator
