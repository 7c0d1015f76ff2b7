"""Sync a kit tree into one scope: gather inputs, plan, apply.

Planning reads everything it needs up front (kit items, registry, manifest,
target probes) so a dry run and a real run compute the same plan from the
same snapshot. Only apply_plan() mutates anything.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from kitsync.context import KitsyncContext
from kitsync.io.manifest import load_migration_manifest
from kitsync.io.registry import load_registry, save_registry
from kitsync.models.artifact import SourceItem
from kitsync.models.config import KitsyncConfig
from kitsync.models.plan import ExecutionResult, ReconcilePlan
from kitsync.models.registry import InstallationRegistry
from kitsync.operations.executor import PlanExecutor
from kitsync.operations.planner import ReconcileInput, reconcile
from kitsync.operations.probes import probe_targets
from kitsync.providers import (
    DEFAULT_PROVIDER,
    PROVIDERS,
    TargetLocator,
    detect_providers,
    get_provider,
    validate_provider_names,
)
from kitsync.sources import collect_kit_items, render_for_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncPlan:
    """A computed plan together with the registry it was computed against."""

    plan: ReconcilePlan
    registry: InstallationRegistry
    scope_root: Path
    global_: bool


def resolve_providers(
    requested: Sequence[str], config: KitsyncConfig, *, home_dir: Path
) -> list[str]:
    """Providers for this run.

    Explicit names win, then the config file, then providers detected in the
    home directory, then the default provider.

    Raises:
        ValueError: If a requested provider is unknown
    """
    if requested:
        return validate_provider_names(list(requested))
    if config.providers:
        return list(config.providers)
    detected = detect_providers(home_dir)
    if detected:
        return detected
    return [DEFAULT_PROVIDER]


def render_sources(kit_dir: Path, providers: Sequence[str]) -> dict[str, list[SourceItem]]:
    """Collect kit items once and render them for each provider.

    Raises:
        FileNotFoundError: If kit_dir does not exist
    """
    items = collect_kit_items(kit_dir)
    return {name: render_for_provider(items, get_provider(name)) for name in providers}


def build_reconcile_input(
    ctx: KitsyncContext,
    kit_dir: Path,
    *,
    providers: Sequence[str],
    global_: bool,
    force: bool,
    config: KitsyncConfig,
    registry: InstallationRegistry,
) -> ReconcileInput:
    """Snapshot everything the planner needs for one scope."""
    if force:
        config = config.with_force()

    source_items = render_sources(kit_dir, providers)
    locator = TargetLocator(
        providers=PROVIDERS, project_root=ctx.project_root, home_dir=ctx.home_dir
    )

    paths: list[Path] = []
    for provider, items in source_items.items():
        for item in items:
            if locator.supports(provider, item.type, global_):
                paths.append(locator.resolve(provider, item, global_))
    paths.extend(Path(r.path) for r in registry.for_scope(global_))

    return ReconcileInput(
        source_items=source_items,
        providers=list(providers),
        global_=global_,
        locator=locator,
        registry=registry,
        probes=probe_targets(paths, max_workers=config.worker_count),
        manifest=load_migration_manifest(kit_dir),
        force=force,
        on_modified=config.on_modified,
        on_untracked=config.on_untracked,
    )


def compute_plan(
    ctx: KitsyncContext,
    kit_dir: Path,
    *,
    providers: Sequence[str],
    global_: bool,
    force: bool,
    config: KitsyncConfig,
) -> SyncPlan:
    """Plan a sync of kit_dir into one scope without touching disk."""
    scope_root = ctx.scope_root(global_)
    registry = load_registry(scope_root)
    reconcile_input = build_reconcile_input(
        ctx,
        kit_dir,
        providers=providers,
        global_=global_,
        force=force,
        config=config,
        registry=registry,
    )
    plan = reconcile(reconcile_input)
    logger.debug("Plan summary: %s", plan.summary.to_dict())
    return SyncPlan(plan=plan, registry=registry, scope_root=scope_root, global_=global_)


def apply_plan(
    ctx: KitsyncContext, sync_plan: SyncPlan, *, config: KitsyncConfig
) -> ExecutionResult:
    """Execute a plan, saving the registry after every completed action."""
    scope_root = sync_plan.scope_root

    def persist(registry: InstallationRegistry) -> None:
        save_registry(scope_root, registry)

    executor = PlanExecutor(
        fs=ctx.fs,
        time=ctx.time,
        scope_root=scope_root,
        registry=sync_plan.registry,
        persist=persist,
        max_workers=config.worker_count,
    )
    return executor.apply(sync_plan.plan)
