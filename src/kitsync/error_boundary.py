"""Error boundary for the CLI entry point.

Predictable failures (bad input, missing kit, unsafe manifest path, a file
that stayed locked through every retry) become one `Error: ...` line on
stderr and exit code 1. Anything else is a bug and keeps its traceback.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click

from kitsync.errors import KitsyncError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Callable[..., Any])

USER_FACING_ERRORS: tuple[type[Exception], ...] = (
    FileExistsError,
    FileNotFoundError,
    PermissionError,
    ValueError,
    KitsyncError,
)


def cli_error_boundary(func: T) -> T:
    """Wrap a CLI entry point so USER_FACING_ERRORS exit cleanly.

    The traceback of a caught error is still logged at debug level, so
    `kitsync --debug ...` shows where it came from.

    Example:
        def main() -> None:
            cli_error_boundary(cli)()
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except USER_FACING_ERRORS as e:
            logger.debug("%s escaped to the CLI boundary", type(e).__name__, exc_info=True)
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
