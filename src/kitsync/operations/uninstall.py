"""Ownership-aware uninstall.

Two ledgers can describe what kitsync put on disk: the per-scope
installation registry, and the older metadata.json TrackedFile ledger of a
legacy install root. Both paths classify every recorded file first and only
then mutate anything:

- TOOL_PRISTINE: deleted
- TOOL_MODIFIED: preserved unless forced
- USER_OWNED: preserved; a missing file only has its ledger entry dropped
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from functools import partial
from pathlib import Path
from typing import assert_never

from kitsync.errors import KitsyncError
from kitsync.io.manifest import is_safe_relative_path
from kitsync.integrations.filesystem import Filesystem
from kitsync.integrations.time import Time
from kitsync.models.metadata import LegacyMetadata, MultiKitMetadata, TrackedFile, upgrade_metadata
from kitsync.models.ownership import Ownership, OwnershipResult
from kitsync.models.registry import InstallationRecord, InstallationRegistry
from kitsync.operations.cleanup import ensure_within, prune_empty_parents
from kitsync.operations.ownership import classify_batch, classify_file, classify_tracked_file
from kitsync.operations.retry import retry_with_backoff

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UninstallDecision:
    """What happens to one recorded file.

    `remove_file` means the file is deleted; `drop_entry` means the ledger
    entry goes away (always true when the file is deleted or already gone).
    A file still shared with another record keeps the file but drops the
    entry.
    """

    path: Path
    ownership: Ownership
    exists: bool
    remove_file: bool
    drop_entry: bool
    reason: str


@dataclass(frozen=True)
class UninstallResult:
    removed: list[Path] = field(default_factory=list)
    preserved: list[UninstallDecision] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)
    pruned_dirs: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def decide(result: OwnershipResult, *, force: bool) -> UninstallDecision:
    """Turn a classification into an uninstall decision."""
    if not result.exists:
        return UninstallDecision(
            path=result.path,
            ownership=result.ownership,
            exists=False,
            remove_file=False,
            drop_entry=True,
            reason="already removed",
        )

    allowed = result.allows_removal(force=force)
    match result.ownership:
        case Ownership.TOOL_PRISTINE:
            reason = "unmodified"
        case Ownership.TOOL_MODIFIED:
            reason = "modified, removed (--force)" if allowed else "modified by user"
        case Ownership.USER_OWNED:
            reason = "user-owned"
        case _:
            assert_never(result.ownership)
    return UninstallDecision(
        path=result.path,
        ownership=result.ownership,
        exists=True,
        remove_file=allowed,
        drop_entry=allowed,
        reason=reason,
    )


def select_records(
    registry: InstallationRegistry,
    *,
    global_: bool,
    providers: Sequence[str] | None = None,
    items: Sequence[str] | None = None,
) -> list[InstallationRecord]:
    """Records of one scope, optionally narrowed by provider and item name."""
    return [
        r
        for r in registry.for_scope(global_)
        if (not providers or r.provider in providers) and (not items or r.item in items)
    ]


def plan_registry_uninstall(
    records: Sequence[InstallationRecord],
    *,
    registry: InstallationRegistry,
    force: bool,
    max_workers: int,
) -> list[tuple[InstallationRecord, UninstallDecision]]:
    """Classify every selected record concurrently.

    A file another record of the registry still points at (AGENTS.md shared
    by several providers) is kept; only the selected record is dropped.
    """
    checksums = {Path(r.path): r.target_checksum for r in records}
    selected = {r.key for r in records}
    holders: dict[Path, set[str]] = {}
    for other in registry.installations:
        if other.key not in selected:
            holders.setdefault(Path(other.path), set()).add(other.provider)

    def classify(path: Path) -> OwnershipResult:
        return classify_file(path, checksums[path])

    results = classify_batch(checksums, classify, max_workers=max_workers)
    decisions: list[tuple[InstallationRecord, UninstallDecision]] = []
    for record in records:
        path = Path(record.path)
        decision = decide(results[path], force=force)
        others = holders.get(path)
        if others and decision.remove_file:
            decision = replace(
                decision,
                remove_file=False,
                reason=f"shared with {', '.join(sorted(others))}",
            )
        decisions.append((record, decision))
    return decisions


def _remove(path: Path, *, root: Path, fs: Filesystem, time: Time) -> list[Path]:
    ensure_within(path.parent, root)

    @retry_with_backoff(time=time, label=str(path))
    def remove() -> None:
        try:
            fs.remove_file(path)
        except FileNotFoundError:
            # Shared files (AGENTS.md) are recorded once per provider
            logger.debug("%s already gone", path)

    remove()
    return prune_empty_parents(path, stop_at=root, fs=fs)


def apply_registry_uninstall(
    decisions: Sequence[tuple[InstallationRecord, UninstallDecision]],
    *,
    fs: Filesystem,
    time: Time,
    scope_root: Path,
    registry: InstallationRegistry,
    persist: Callable[[InstallationRegistry], None],
) -> tuple[InstallationRegistry, UninstallResult]:
    """Remove files and their records, persisting after each one."""
    removed: list[Path] = []
    preserved: list[UninstallDecision] = []
    failed: list[tuple[Path, str]] = []
    pruned: list[Path] = []

    for record, decision in decisions:
        if not decision.drop_entry:
            preserved.append(decision)
            continue
        if decision.remove_file:
            try:
                pruned.extend(_remove(decision.path, root=scope_root, fs=fs, time=time))
            except (OSError, KitsyncError) as e:
                logger.warning("Failed to remove %s: %s", decision.path, e)
                failed.append((decision.path, str(e)))
                continue
            removed.append(decision.path)
        elif decision.exists:
            preserved.append(decision)
        registry = registry.remove(*record.key)
        persist(registry)

    return registry, UninstallResult(
        removed=removed, preserved=preserved, failed=failed, pruned_dirs=pruned
    )


def plan_legacy_uninstall(
    install_root: Path,
    metadata: LegacyMetadata | MultiKitMetadata,
    *,
    kit: str | None,
    force: bool,
    max_workers: int,
) -> list[tuple[TrackedFile, UninstallDecision]]:
    """Classify the tracked files of one kit, or of every kit if kit is None.

    Raises:
        ValueError: If the named kit is not in the ledger
    """
    by_path: dict[Path, TrackedFile] = {}
    for tracked in _kit_files(metadata, kit):
        if not is_safe_relative_path(tracked.path):
            logger.warning("Skipping unsafe ledger entry: %s", tracked.path)
            continue
        by_path[install_root / tracked.path] = tracked

    classify = partial(classify_tracked_file, install_root=install_root, metadata=metadata)
    results = classify_batch(by_path, classify, max_workers=max_workers)
    return [(tracked, decide(results[path], force=force)) for path, tracked in by_path.items()]


def _kit_files(metadata: LegacyMetadata | MultiKitMetadata, kit: str | None) -> list[TrackedFile]:
    match metadata:
        case LegacyMetadata():
            if kit is not None and kit != metadata.kit_name:
                raise ValueError(f"Kit '{kit}' is not installed")
            return metadata.all_files()
        case MultiKitMetadata():
            if kit is None:
                return metadata.all_files()
            if kit not in metadata.kits:
                raise ValueError(f"Kit '{kit}' is not installed")
            return metadata.files_for_kit(kit)
        case _:
            assert_never(metadata)


def apply_legacy_uninstall(
    install_root: Path,
    metadata: LegacyMetadata | MultiKitMetadata,
    decisions: Sequence[tuple[TrackedFile, UninstallDecision]],
    *,
    kit: str | None,
    fs: Filesystem,
    time: Time,
    persist: Callable[[MultiKitMetadata | None], None],
) -> UninstallResult:
    """Remove classified files and rewrite the ledger in multi-kit form.

    Entries for preserved files stay in the ledger; a kit with nothing left
    is dropped from it. persist receives None once no kit remains.
    """
    removed: list[Path] = []
    preserved: list[UninstallDecision] = []
    failed: list[tuple[Path, str]] = []
    pruned: list[Path] = []
    dropped: set[str] = set()

    for tracked, decision in decisions:
        if not decision.drop_entry:
            preserved.append(decision)
            continue
        if decision.remove_file:
            try:
                pruned.extend(_remove(decision.path, root=install_root, fs=fs, time=time))
            except (OSError, KitsyncError) as e:
                logger.warning("Failed to remove %s: %s", decision.path, e)
                failed.append((decision.path, str(e)))
                continue
            removed.append(decision.path)
        dropped.add(tracked.path)

    upgraded = upgrade_metadata(metadata, now=time.now_iso())
    kits = [kit] if kit is not None else list(upgraded.kits)
    for name in kits:
        remaining = [f for f in upgraded.files_for_kit(name) if f.path not in dropped]
        if remaining:
            upgraded = upgraded.with_kit_files(name, remaining)
        else:
            upgraded = upgraded.without_kit(name)
    if upgraded.files is not None:
        upgraded = upgraded.model_copy(
            update={"files": [f for f in upgraded.files if f.path not in dropped]}
        )
    persist(upgraded if upgraded.kits else None)

    return UninstallResult(removed=removed, preserved=preserved, failed=failed, pruned_dirs=pruned)
