"""Configuration commands."""

import click

from kitsync.cli.output import user_output
from kitsync.context_helpers import require_context
from kitsync.io.config import config_path, save_config
from kitsync.models.config import KitsyncConfig
from kitsync.providers import detect_providers


@click.group(name="config")
def config_group() -> None:
    """Manage kitsync configuration."""


@config_group.command()
@click.option("--global", "-g", "global_", is_flag=True, help="Write ~/.kitsync/config.toml")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init(ctx: click.Context, global_: bool, force: bool) -> None:
    """Write a config file with the providers detected on this machine."""
    kitsync_ctx = require_context(ctx)
    path = config_path(
        project_root=kitsync_ctx.project_root, home_dir=kitsync_ctx.home_dir, global_=global_
    )
    if path.exists() and not force:
        raise FileExistsError(f"Config already exists at {path} (use --force to overwrite)")

    detected = detect_providers(kitsync_ctx.home_dir)
    save_config(path, KitsyncConfig(providers=detected or None))
    user_output(f"Wrote {path}")
    if detected:
        user_output(f"Providers: {', '.join(detected)}")
