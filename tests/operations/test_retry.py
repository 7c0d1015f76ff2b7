"""Tests for retry_with_backoff."""

import errno

import pytest

from kitsync.errors import TransientIOError
from kitsync.integrations.time.fake import FakeTime
from kitsync.operations.retry import retry_with_backoff


def test_transient_errors_are_retried_with_backoff() -> None:
    time = FakeTime()
    attempts: list[int] = []

    @retry_with_backoff(time=time, label="agents/a.md")
    def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise OSError(errno.EBUSY, "busy")
        return "done"

    assert flaky() == "done"
    assert len(attempts) == 3
    assert time.sleep_calls == pytest.approx([0.1, 0.2])


def test_non_transient_error_is_raised_immediately() -> None:
    time = FakeTime()

    @retry_with_backoff(time=time)
    def broken() -> None:
        raise FileNotFoundError(errno.ENOENT, "missing")

    with pytest.raises(FileNotFoundError):
        broken()
    assert time.sleep_calls == []


def test_persistent_transient_error_gives_up() -> None:
    time = FakeTime()

    @retry_with_backoff(time=time, label="agents/a.md")
    def locked() -> None:
        raise PermissionError(errno.EACCES, "Permission denied")

    with pytest.raises(TransientIOError, match="gave up after 3 attempts") as exc_info:
        locked()
    assert exc_info.value.path == "agents/a.md"
    assert len(time.sleep_calls) == 2


def test_zero_attempts_is_rejected() -> None:
    @retry_with_backoff(0, time=FakeTime())
    def never() -> None:
        raise AssertionError("not called")

    with pytest.raises(ValueError, match="max_attempts"):
        never()
