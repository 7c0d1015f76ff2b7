"""Standalone-skill cleanup command."""

from pathlib import Path

import click

from kitsync.cli.output import user_output
from kitsync.context_helpers import require_context
from kitsync.io.metadata import migrate_metadata
from kitsync.operations.cleanup import cleanup_standalone_skills


@click.command(name="cleanup-skills")
@click.argument("claude_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument(
    "plugin_skills_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option("--dry-run", is_flag=True, help="Show which skills would be removed")
@click.pass_context
def cleanup_skills(
    ctx: click.Context, claude_dir: Path, plugin_skills_dir: Path, dry_run: bool
) -> None:
    """Remove standalone skills that a plugin now ships.

    Every removed skill is backed up first under
    CLAUDE_DIR/.kitsync/backups/skills. Skills containing files you created
    or edited are kept.
    """
    kitsync_ctx = require_context(ctx)
    if dry_run:
        kitsync_ctx = kitsync_ctx.with_dry_run()
    else:
        migration = migrate_metadata(claude_dir, now=kitsync_ctx.time.now_iso())
        if migration.migrated:
            user_output(f"Upgraded {claude_dir / 'metadata.json'} to the multi-kit format")

    result = cleanup_standalone_skills(claude_dir, plugin_skills_dir, fs=kitsync_ctx.fs)

    verb = "Would remove" if dry_run else "Removed"
    for name in result.removed:
        user_output(f"  {verb} skills/{name}")
    for name in result.preserved:
        user_output(f"  Preserved skills/{name} (contains your changes)")
    for name in result.failed:
        user_output(click.style(f"  Failed skills/{name}", fg="red"))
    if not (result.removed or result.preserved or result.failed):
        user_output("No standalone skills overlap with the plugin")
    elif result.removed and result.backup_dir is not None:
        user_output(f"Backups: {result.backup_dir}")

    if result.failed:
        raise SystemExit(1)
