"""Accessing the KitsyncContext from click commands."""

import click

from kitsync.context import KitsyncContext


def require_context(ctx: click.Context) -> KitsyncContext:
    """Get the KitsyncContext, exiting with an error if it was never initialized.

    Raises:
        SystemExit: If context not initialized (exits with code 1)
    """
    if not isinstance(ctx.obj, KitsyncContext):
        click.echo("Error: Context not initialized", err=True)
        raise SystemExit(1)
    return ctx.obj
