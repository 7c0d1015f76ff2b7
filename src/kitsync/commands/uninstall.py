"""Uninstall commands: registry-tracked items and legacy install roots."""

from collections.abc import Callable
from pathlib import Path

import click

from kitsync.cli.output import user_output
from kitsync.context import KitsyncContext
from kitsync.context_helpers import require_context
from kitsync.io.metadata import load_metadata, remove_metadata, save_metadata
from kitsync.io.registry import load_registry, save_registry
from kitsync.models.metadata import MultiKitMetadata
from kitsync.models.registry import InstallationRegistry
from kitsync.operations.uninstall import (
    UninstallResult,
    apply_legacy_uninstall,
    apply_registry_uninstall,
    plan_legacy_uninstall,
    plan_registry_uninstall,
    select_records,
)
from kitsync.providers import validate_provider_names


def _report(result: UninstallResult, *, dry_run: bool) -> None:
    verb = "Would remove" if dry_run else "Removed"
    for path in result.removed:
        user_output(f"  {verb} {path}")
    for decision in result.preserved:
        user_output(f"  Preserved {decision.path} ({decision.reason})")
    for path, error in result.failed:
        user_output(click.style(f"  Failed {path}: {error}", fg="red"))
    user_output(
        f"{len(result.removed)} removed, {len(result.preserved)} preserved, "
        f"{len(result.failed)} failed"
    )


@click.command()
@click.option("--provider", "-p", "providers", multiple=True, help="Only this provider")
@click.option("--item", "items", multiple=True, help="Only this item (repeatable)")
@click.option("--global", "-g", "global_", is_flag=True, help="Uninstall from the home directory")
@click.option("--force", "-f", is_flag=True, help="Also remove files you modified")
@click.option("--dry-run", is_flag=True, help="Show what would be removed")
@click.pass_context
def uninstall(
    ctx: click.Context,
    providers: tuple[str, ...],
    items: tuple[str, ...],
    global_: bool,
    force: bool,
    dry_run: bool,
) -> None:
    """Remove installed items recorded in the registry.

    Unmodified files are removed. Files you edited are kept unless --force;
    files kitsync has no record of are never touched. A file another provider
    still records (AGENTS.md) stays; only the selected record is dropped.
    """
    kitsync_ctx = require_context(ctx)
    if dry_run:
        kitsync_ctx = kitsync_ctx.with_dry_run()
    config = kitsync_ctx.load_config(global_=global_)
    scope_root = kitsync_ctx.scope_root(global_)

    registry = load_registry(scope_root)
    records = select_records(
        registry,
        global_=global_,
        providers=validate_provider_names(list(providers)) if providers else None,
        items=list(items) or None,
    )
    if not records:
        user_output("Nothing to uninstall")
        return

    decisions = plan_registry_uninstall(
        records, registry=registry, force=force, max_workers=config.worker_count
    )

    def persist(updated: InstallationRegistry) -> None:
        if not kitsync_ctx.dry_run:
            save_registry(scope_root, updated)

    _, result = apply_registry_uninstall(
        decisions,
        fs=kitsync_ctx.fs,
        time=kitsync_ctx.time,
        scope_root=scope_root,
        registry=registry,
        persist=persist,
    )
    _report(result, dry_run=dry_run)
    if not result.ok:
        raise SystemExit(1)


def _persist_metadata(
    kitsync_ctx: KitsyncContext, install_root: Path
) -> Callable[[MultiKitMetadata | None], None]:
    def persist(metadata: MultiKitMetadata | None) -> None:
        if kitsync_ctx.dry_run:
            return
        if metadata is None:
            remove_metadata(install_root)
        else:
            save_metadata(install_root, metadata)

    return persist


@click.command(name="uninstall-legacy")
@click.argument("install_root", type=click.Path(file_okay=False, path_type=Path))
@click.option("--kit", default=None, help="Kit to uninstall (default: every kit in the ledger)")
@click.option("--force", "-f", is_flag=True, help="Also remove files you modified")
@click.option("--dry-run", is_flag=True, help="Show what would be removed")
@click.pass_context
def uninstall_legacy(
    ctx: click.Context, install_root: Path, kit: str | None, force: bool, dry_run: bool
) -> None:
    """Uninstall a kit tracked by an older metadata.json ledger.

    INSTALL_ROOT is the directory holding metadata.json (usually .claude).
    The ledger is upgraded to the multi-kit format as part of the run.
    """
    kitsync_ctx = require_context(ctx)
    if dry_run:
        kitsync_ctx = kitsync_ctx.with_dry_run()

    metadata = load_metadata(install_root)
    if metadata is None:
        raise FileNotFoundError(f"No kit metadata found in {install_root}")

    config = kitsync_ctx.load_config(global_=False)
    decisions = plan_legacy_uninstall(
        install_root, metadata, kit=kit, force=force, max_workers=config.worker_count
    )
    result = apply_legacy_uninstall(
        install_root,
        metadata,
        decisions,
        kit=kit,
        fs=kitsync_ctx.fs,
        time=kitsync_ctx.time,
        persist=_persist_metadata(kitsync_ctx, install_root),
    )
    _report(result, dry_run=dry_run)
    if not result.ok:
        raise SystemExit(1)
