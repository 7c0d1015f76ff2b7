"""Registry maintenance commands."""

import click

from kitsync.cli.output import user_output
from kitsync.context_helpers import require_context
from kitsync.io.registry import load_registry, prune_registry, save_registry


@click.group(name="registry")
def registry_group() -> None:
    """Inspect and maintain the installation registry."""


@registry_group.command()
@click.option("--global", "-g", "global_", is_flag=True, help="Prune the home directory registry")
@click.option("--dry-run", is_flag=True, help="Show which records would be dropped")
@click.pass_context
def prune(ctx: click.Context, global_: bool, dry_run: bool) -> None:
    """Drop records whose installed file no longer exists."""
    kitsync_ctx = require_context(ctx)
    scope_root = kitsync_ctx.scope_root(global_)

    registry, removed = prune_registry(load_registry(scope_root))
    if not removed:
        user_output("Registry is in sync with disk")
        return

    verb = "Would drop" if dry_run else "Dropped"
    for record in removed:
        user_output(f"  {verb} {record.provider} {record.type} {record.item} ({record.path})")
    if not dry_run:
        save_registry(scope_root, registry)
    user_output(f"{len(removed)} stale record(s)")
