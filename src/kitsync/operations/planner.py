"""Reconciliation planner.

Pure function from (desired source items, registry, filesystem probes,
migration manifest, provider targets) to a ReconcilePlan. No I/O happens
here; everything the decision needs is supplied in ReconcileInput, so a dry
run and a real run compute the identical plan.

Order of work:

1. manifest renames and provider-path migrations (deletes of old locations)
2. one decision per (provider, source item)
3. orphaned registry records
4. deletes of files another record still holds become record-only skips
5. de-duplication and deterministic ordering
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from typing import assert_never

from kitsync.errors import UnsupportedTargetError
from kitsync.io.manifest import applicable_entries, is_safe_relative_path, normalize_relative_path
from kitsync.models.artifact import ARTIFACT_TYPES, SourceItem
from kitsync.models.manifest import MigrationManifest
from kitsync.models.ownership import Ownership
from kitsync.models.plan import (
    ACTION_KINDS,
    PATH_MIGRATED_REASON,
    REMOVED_UPSTREAM_REASON,
    RENAMED_REASON,
    ConflictResolution,
    ReconcileAction,
    ReconcilePlan,
)
from kitsync.models.registry import (
    UNKNOWN_CHECKSUM,
    InstallationRecord,
    InstallationRegistry,
    RecordKey,
)
from kitsync.operations.probes import TargetProbe
from kitsync.providers.locator import TargetLocator

logger = logging.getLogger(__name__)

UNTRACKED_REASON = "untracked file at target path"
USER_MODIFIED_REASON = "user modified installed file"
MISSING_REASON = "installed file missing from disk"
UNCHANGED_REASON = "unchanged"
ALREADY_MATCHES_REASON = "Target already matches kit content"
PREDATES_CHECKSUMS_REASON = "Registry entry predates checksum tracking"
PRESERVING_USER_OWNED = "preserving user-owned file"


@dataclass(frozen=True)
class ReconcileInput:
    """Everything the planner needs for one scope.

    Attributes:
        source_items: Rendered items per provider
        providers: Providers active in this run
        global_: True for the user-home scope, False for the project scope
        locator: Resolves target paths
        registry: Registry of this scope
        probes: str(path) -> target state, for every resolved target and every
            recorded path
        manifest: Migration manifest shipped with the kit, if any
        force: Allow deleting files the user modified
        on_modified: Resolution for conflicts on tool-installed files
        on_untracked: Resolution for foreign files at a target path
    """

    source_items: Mapping[str, Sequence[SourceItem]]
    providers: Sequence[str]
    global_: bool
    locator: TargetLocator
    registry: InstallationRegistry
    probes: Mapping[str, TargetProbe]
    manifest: MigrationManifest | None = None
    force: bool = False
    on_modified: ConflictResolution = "keep"
    on_untracked: ConflictResolution = "keep"


def ownership_from_probe(
    probe: TargetProbe | None, expected_checksum: str | None
) -> Ownership | None:
    """Classify a snapshot the same way classify_file() classifies a live path.

    Returns None when the snapshot has no entry for the path.
    """
    if probe is None:
        return None
    if not probe.exists or probe.is_symlink or expected_checksum is None:
        return Ownership.USER_OWNED
    if (
        probe.checksum is not None
        and expected_checksum != UNKNOWN_CHECKSUM
        and probe.checksum == expected_checksum
    ):
        return Ownership.TOOL_PRISTINE
    return Ownership.TOOL_MODIFIED


def reconcile(input: ReconcileInput) -> ReconcilePlan:
    """Compute the plan for one scope."""
    providers = list(dict.fromkeys(input.providers))
    targets = _resolve_targets(input, providers)

    migrations = _migration_actions(input)
    # A migration whose old location is exactly where the item lands now is a no-op
    for provider, item, path in targets:
        key = (provider, item.type, item.name, input.global_)
        migration = migrations.get(key)
        if migration is not None and path is not None and migration.previous_path == str(path):
            del migrations[key]

    actions: list[ReconcileAction] = list(migrations.values())
    for provider, item, path in targets:
        actions.append(_decide(input, provider, item, path, migrated=set(migrations)))

    actions.extend(_orphan_actions(input, providers, migrated=set(migrations)))
    actions = _keep_shared_files(input, actions)

    manifest_version = input.manifest.cli_version if input.manifest is not None else None
    return ReconcilePlan.from_actions(_sorted(_dedupe(actions)), manifest_version)


def _resolve_targets(
    input: ReconcileInput, providers: list[str]
) -> list[tuple[str, SourceItem, Path | None]]:
    targets: list[tuple[str, SourceItem, Path | None]] = []
    for provider in providers:
        for item in input.source_items.get(provider, ()):
            try:
                path: Path | None = input.locator.resolve(provider, item, input.global_)
            except UnsupportedTargetError:
                path = None
            targets.append((provider, item, path))
    return targets


def _find_record(
    input: ReconcileInput, provider: str, item: SourceItem
) -> InstallationRecord | None:
    record = input.registry.find(provider, item.type, item.name, input.global_)
    if record is not None or item.type != "config":
        return record
    # Config is one file per provider and scope; tolerate a renamed config item
    for candidate in input.registry.installations:
        if (
            candidate.type == "config"
            and candidate.provider == provider
            and candidate.global_ == input.global_
        ):
            return candidate
    return None


def _decide(
    input: ReconcileInput,
    provider: str,
    item: SourceItem,
    path: Path | None,
    *,
    migrated: set[RecordKey],
) -> ReconcileAction:
    if path is None:
        error = UnsupportedTargetError(provider, item.type, global_scope=input.global_)
        return ReconcileAction(
            action="skip",
            item=item.name,
            type=item.type,
            provider=provider,
            global_=input.global_,
            reason=str(error),
            path="",
            source_path=item.source_path,
        )

    base = ReconcileAction(
        action="skip",
        item=item.name,
        type=item.type,
        provider=provider,
        global_=input.global_,
        reason="",
        path=str(path),
        source_path=item.source_path,
        content=item.rendered_content,
        source_checksum=item.content_checksum,
    )
    probe = input.probes.get(str(path))

    record = _find_record(input, provider, item)
    if record is not None and (record.key in migrated or record.path != str(path)):
        # Old location is being cleaned up; this item is a fresh install at the new one
        record = None

    if record is None:
        return _decide_untracked(input, base, probe)

    if not record.has_source_checksum:
        target_checksum = record.target_checksum
        if not record.has_target_checksum and probe is not None and probe.checksum is not None:
            target_checksum = probe.checksum
        return replace(
            base,
            reason=PREDATES_CHECKSUMS_REASON,
            target_checksum=target_checksum,
            refresh_record=True,
        )

    source_changed = item.content_checksum != record.source_checksum
    if probe is not None and probe.exists and probe.checksum == item.content_checksum:
        if not source_changed and probe.checksum == record.target_checksum:
            return replace(
                base,
                reason=UNCHANGED_REASON,
                target_checksum=record.target_checksum,
                refresh_record=record.source_path != item.source_path,
            )
        return replace(
            base,
            reason=ALREADY_MATCHES_REASON,
            target_checksum=probe.checksum,
            refresh_record=True,
        )

    ownership = ownership_from_probe(probe, record.target_checksum)
    match ownership:
        case None:
            if source_changed:
                return replace(
                    base,
                    action="conflict",
                    reason="Target state unavailable while kit content changed",
                    resolution="keep",
                )
            return replace(base, reason="Target state unavailable; preserving target")
        case Ownership.TOOL_PRISTINE:
            if source_changed:
                return replace(
                    base, action="update", reason="Kit content changed, target untouched"
                )
            return replace(
                base,
                reason=UNCHANGED_REASON,
                target_checksum=record.target_checksum,
                refresh_record=record.source_path != item.source_path,
            )
        case Ownership.USER_OWNED:
            # Recorded but gone from disk
            missing = probe is not None and not probe.exists
            reason = MISSING_REASON if missing else USER_MODIFIED_REASON
            return replace(base, action="conflict", reason=reason, resolution=input.on_modified)
        case Ownership.TOOL_MODIFIED:
            return replace(
                base, action="conflict", reason=USER_MODIFIED_REASON, resolution=input.on_modified
            )
        case _:
            assert_never(ownership)


def _decide_untracked(
    input: ReconcileInput, base: ReconcileAction, probe: TargetProbe | None
) -> ReconcileAction:
    if probe is None or not probe.exists:
        elsewhere = any(
            r.item == base.item and r.type == base.type for r in input.registry.installations
        )
        reason = (
            "New provider for existing item" if elsewhere else "New item, not previously installed"
        )
        return replace(base, action="install", reason=reason)

    if probe.checksum == base.source_checksum:
        return replace(
            base,
            reason=ALREADY_MATCHES_REASON,
            target_checksum=probe.checksum,
            refresh_record=True,
        )
    return replace(base, action="conflict", reason=UNTRACKED_REASON, resolution=input.on_untracked)


def _migration_actions(input: ReconcileInput) -> dict[RecordKey, ReconcileAction]:
    """Deletes of old locations declared by the manifest, keyed by record.

    Renames are collected first so they take precedence over a path
    migration touching the same record.
    """
    manifest = input.manifest
    if manifest is None:
        return {}

    applied = input.registry.applied_manifest_version
    records = input.registry.for_scope(input.global_)
    actions: dict[RecordKey, ReconcileAction] = {}

    for rename in applicable_entries(manifest.renames, applied, manifest.cli_version):
        if not (is_safe_relative_path(rename.from_) and is_safe_relative_path(rename.to)):
            logger.warning("Skipping unsafe manifest rename: %s -> %s", rename.from_, rename.to)
            continue
        old_source = normalize_relative_path(rename.from_)
        for record in records:
            if record.key in actions or normalize_relative_path(record.source_path) != old_source:
                continue
            actions[record.key] = _migration_delete(
                input,
                record,
                reason=f"{RENAMED_REASON}: {rename.from_} -> {rename.to}",
                previous_item=record.item,
            )

    scope_root = input.locator.scope_root(input.global_)
    migrations = applicable_entries(
        manifest.provider_path_migrations, applied, manifest.cli_version
    )
    for migration in migrations:
        if not (is_safe_relative_path(migration.from_) and is_safe_relative_path(migration.to)):
            logger.warning(
                "Skipping unsafe provider path migration: %s -> %s", migration.from_, migration.to
            )
            continue
        old_prefix = PurePosixPath(normalize_relative_path(migration.from_)).parts
        if not old_prefix:
            continue
        for record in records:
            if record.key in actions:
                continue
            if record.provider != migration.provider or record.type != migration.type:
                continue
            if not _starts_with(record.path, scope_root, old_prefix):
                continue
            actions[record.key] = _migration_delete(
                input,
                record,
                reason=f"{PATH_MIGRATED_REASON}: {migration.from_} -> {migration.to}",
                previous_item=None,
            )

    return actions


def _starts_with(path: str, root: Path, prefix: tuple[str, ...]) -> bool:
    try:
        relative = Path(path).relative_to(root)
    except ValueError:
        return False
    return PurePosixPath(relative.as_posix()).parts[: len(prefix)] == prefix


def _migration_delete(
    input: ReconcileInput,
    record: InstallationRecord,
    *,
    reason: str,
    previous_item: str | None,
) -> ReconcileAction:
    action = ReconcileAction(
        action="delete",
        item=record.item,
        type=record.type,
        provider=record.provider,
        global_=record.global_,
        reason=reason,
        path=record.path,
        source_path=record.source_path,
        previous_item=previous_item,
        previous_path=record.path,
    )
    probe = input.probes.get(record.path)
    ownership = ownership_from_probe(probe, record.target_checksum)
    if ownership == Ownership.USER_OWNED and probe is not None and probe.exists:
        return replace(action, action="skip", reason=f"{reason}; {PRESERVING_USER_OWNED}")
    if ownership == Ownership.TOOL_MODIFIED and not input.force:
        return replace(action, action="skip", reason=f"{reason}; preserving modified file")
    return action


def _orphan_actions(
    input: ReconcileInput, providers: list[str], *, migrated: set[RecordKey]
) -> list[ReconcileAction]:
    active = set(providers)
    wanted: set[tuple[str, str, str]] = set()
    config_sources: set[str] = set()
    for provider in providers:
        for item in input.source_items.get(provider, ()):
            wanted.add((provider, item.type, item.name))
            if item.type == "config":
                config_sources.add(provider)

    actions: list[ReconcileAction] = []
    for record in input.registry.for_scope(input.global_):
        if record.provider not in active or record.key in migrated:
            continue
        if record.install_source == "user":
            continue
        if record.type == "config" and record.provider in config_sources:
            continue
        if (record.provider, record.type, record.item) in wanted:
            continue
        actions.append(_orphan_action(input, record))
    return actions


def _orphan_action(input: ReconcileInput, record: InstallationRecord) -> ReconcileAction:
    action = ReconcileAction(
        action="delete",
        item=record.item,
        type=record.type,
        provider=record.provider,
        global_=record.global_,
        reason=REMOVED_UPSTREAM_REASON,
        path=record.path,
        source_path=record.source_path,
    )
    probe = input.probes.get(record.path)
    ownership = ownership_from_probe(probe, record.target_checksum)
    match ownership:
        case None:
            return replace(
                action, action="skip", reason=f"{REMOVED_UPSTREAM_REASON}; target state unavailable"
            )
        case Ownership.TOOL_PRISTINE:
            return action
        case Ownership.USER_OWNED:
            if probe is not None and not probe.exists:
                return replace(
                    action,
                    action="skip",
                    reason=f"{REMOVED_UPSTREAM_REASON}; file already gone",
                    drop_record=True,
                )
            return replace(
                action, action="skip", reason=f"{REMOVED_UPSTREAM_REASON}; {PRESERVING_USER_OWNED}"
            )
        case Ownership.TOOL_MODIFIED:
            if input.force:
                return action
            return replace(
                action, action="skip", reason=f"{REMOVED_UPSTREAM_REASON}; preserving modified file"
            )
        case _:
            assert_never(ownership)


def _keep_shared_files(
    input: ReconcileInput, actions: list[ReconcileAction]
) -> list[ReconcileAction]:
    """Turn deletes of a path some surviving record still holds into record-only skips.

    Providers share files such as AGENTS.md; removing one provider's record
    must leave the file for the others.
    """
    deleted = {a.key for a in actions if a.action == "delete"}
    holders: dict[str, set[str]] = {}
    for record in input.registry.for_scope(input.global_):
        if record.key not in deleted:
            holders.setdefault(record.path, set()).add(record.provider)

    kept: list[ReconcileAction] = []
    for action in actions:
        others = holders.get(action.path) if action.action == "delete" else None
        if others:
            action = replace(
                action,
                action="skip",
                reason=f"{action.reason}; file shared with {', '.join(sorted(others))}",
                drop_record=True,
            )
        kept.append(action)
    return kept


def _dedupe(actions: list[ReconcileAction]) -> list[ReconcileAction]:
    seen: set[tuple[str, RecordKey, str]] = set()
    unique: list[ReconcileAction] = []
    for action in actions:
        key = (action.action, action.key, action.path)
        if key in seen:
            continue
        seen.add(key)
        unique.append(action)
    return unique


def _sorted(actions: list[ReconcileAction]) -> list[ReconcileAction]:
    return sorted(
        actions,
        key=lambda a: (
            ACTION_KINDS.index(a.action),
            ARTIFACT_TYPES.index(a.type),
            a.provider,
            a.item,
            a.path,
        ),
    )
