"""Install command: reconcile a kit tree into a scope.

Install and update are the same operation. `plan` is the dry-run alias and
prints exactly the plan `install` would execute.
"""

from pathlib import Path

import click

from kitsync.cli.output import machine_output, user_output
from kitsync.cli.rendering import format_plan, format_result, format_summary
from kitsync.context_helpers import require_context
from kitsync.operations.sync import apply_plan, compute_plan, resolve_providers


def _run(
    ctx: click.Context,
    kit_dir: Path,
    providers: tuple[str, ...],
    global_: bool,
    force: bool,
    dry_run: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    kitsync_ctx = require_context(ctx)
    config = kitsync_ctx.load_config(global_=global_)
    selected = resolve_providers(providers, config, home_dir=kitsync_ctx.home_dir)

    sync_plan = compute_plan(
        kitsync_ctx,
        kit_dir,
        providers=selected,
        global_=global_,
        force=force,
        config=config,
    )
    plan = sync_plan.plan

    if as_json:
        machine_output(plan.to_dict())
    else:
        scope = "global" if global_ else "project"
        user_output(f"Reconciling {kit_dir} into {scope} scope for: {', '.join(selected)}")
        for line in format_plan(plan, show_skipped=verbose):
            user_output(line)
        user_output(format_summary(plan))

    if dry_run:
        if not as_json:
            user_output("Dry run: no changes made")
        return

    result = apply_plan(kitsync_ctx, sync_plan, config=config)
    if not as_json:
        for line in format_result(result):
            user_output(line)
    if not result.ok:
        raise SystemExit(1)


_kit_dir_argument = click.argument(
    "kit_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
_provider_option = click.option(
    "--provider",
    "-p",
    "providers",
    multiple=True,
    help="Provider to install for (repeatable; default: config, then detected)",
)
_global_option = click.option(
    "--global", "-g", "global_", is_flag=True, help="Install into the home directory"
)
_force_option = click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite modified files, back up foreign files, delete modified orphans",
)
_json_option = click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON")
_verbose_option = click.option("--verbose", "-v", is_flag=True, help="Also list skipped items")


@click.command()
@_kit_dir_argument
@_provider_option
@_global_option
@_force_option
@click.option("--dry-run", is_flag=True, help="Show the plan without changing anything")
@_json_option
@_verbose_option
@click.pass_context
def install(
    ctx: click.Context,
    kit_dir: Path,
    providers: tuple[str, ...],
    global_: bool,
    force: bool,
    dry_run: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Install or update a kit.

    Idempotent: running it twice in a row changes nothing the second time.

    Examples:

        # Install into the current project for detected providers
        kitsync install ./my-kit

        # Install globally for two providers
        kitsync install ./my-kit -g -p claude-code -p codex
    """
    _run(ctx, kit_dir, providers, global_, force, dry_run, as_json, verbose)


@click.command()
@_kit_dir_argument
@_provider_option
@_global_option
@_force_option
@_json_option
@_verbose_option
@click.pass_context
def plan(
    ctx: click.Context,
    kit_dir: Path,
    providers: tuple[str, ...],
    global_: bool,
    force: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Show what install would do (same as install --dry-run)."""
    _run(ctx, kit_dir, providers, global_, force, True, as_json, verbose)
