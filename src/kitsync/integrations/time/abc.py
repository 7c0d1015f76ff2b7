"""Clock operations abstraction for testing.

Retry backoff sleeps and record/backup timestamps go through this ABC so
tests neither sleep nor depend on the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Sleep for specified number of seconds.

        Args:
            seconds: Number of seconds to sleep
        """
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...

    def now_iso(self) -> str:
        return self.now().isoformat().replace("+00:00", "Z")
