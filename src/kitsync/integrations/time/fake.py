"""Fake Time implementation for testing.

FakeTime tracks sleep() calls without actually sleeping and reports a fixed
clock, enabling fast deterministic tests.
"""

from datetime import UTC, datetime

from kitsync.integrations.time.abc import Time

DEFAULT_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeTime(Time):
    """In-memory fake implementation that tracks calls without sleeping.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        self._now = now
        self._sleep_calls: list[float] = []

    @property
    def sleep_calls(self) -> list[float]:
        """Seconds values passed to sleep(), for test assertions only."""
        return self._sleep_calls

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)

    def now(self) -> datetime:
        return self._now
