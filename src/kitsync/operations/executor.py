"""Plan execution.

PlanExecutor is the only component that mutates managed paths. Deletes run
first and sequentially so a migrated item's old file is gone before its new
location is written. Writes fan out over a thread pool, one task per target
path, so two providers sharing a file (AGENTS.md) never write it
concurrently. Registry updates happen on the calling thread as each action
completes and are persisted immediately: an interrupted run leaves a
registry that matches what actually reached the disk.
"""

import logging
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from kitsync.errors import KitsyncError
from kitsync.integrations.filesystem import Filesystem
from kitsync.integrations.time import Time
from kitsync.io.checksum import hash_file
from kitsync.io.manifest import max_version
from kitsync.models.plan import ActionFailure, ExecutionResult, ReconcileAction, ReconcilePlan
from kitsync.models.registry import UNKNOWN_CHECKSUM, InstallationRecord, InstallationRegistry
from kitsync.operations.cleanup import prune_empty_parents
from kitsync.operations.retry import retry_with_backoff

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".kitsync-backup-"


@dataclass(frozen=True)
class _WriteOutcome:
    """Exactly one of target_checksum and error is set."""

    action: ReconcileAction
    target_checksum: str | None = None
    error: str | None = None


def backup_path_for(path: Path, timestamp: str) -> Path:
    return path.with_name(f"{path.name}{BACKUP_SUFFIX}{timestamp}")


class PlanExecutor:
    """Applies a ReconcilePlan to disk and keeps the registry in step.

    Args:
        fs: Filesystem used for every mutation
        time: Clock for record timestamps, backup names, and retry sleeps
        scope_root: Root of the scope; empty directories are pruned up to it
        registry: Registry the plan was computed against
        persist: Called with the updated registry after every completed action
        max_workers: Upper bound on concurrent write tasks
    """

    def __init__(
        self,
        *,
        fs: Filesystem,
        time: Time,
        scope_root: Path,
        registry: InstallationRegistry,
        persist: Callable[[InstallationRegistry], None],
        max_workers: int,
    ) -> None:
        self._fs = fs
        self._time = time
        self._scope_root = scope_root
        self._registry = registry
        self._persist = persist
        self._max_workers = max_workers

    @property
    def registry(self) -> InstallationRegistry:
        return self._registry

    def apply(self, plan: ReconcilePlan) -> ExecutionResult:
        """Apply every action; one failure never stops the rest."""
        applied: list[ReconcileAction] = []
        skipped: list[ReconcileAction] = []
        failed: list[ActionFailure] = []
        migration_failed = False

        for action in plan.by_action("delete"):
            try:
                self._delete(action)
            except (OSError, KitsyncError) as e:
                logger.warning("Failed to delete %s: %s", action.path, e)
                failed.append(ActionFailure(action=action, error=str(e)))
                migration_failed = migration_failed or action.is_migration
                continue
            self._commit(self._registry.remove(*action.key))
            applied.append(action)

        writes = [a for a in plan.actions if a.writes_file]
        for outcome in self._run_writes(writes):
            match outcome:
                case _WriteOutcome(error=str() as error):
                    failed.append(ActionFailure(action=outcome.action, error=error))
                case _WriteOutcome(target_checksum=str() as checksum):
                    self._commit(self._registry.upsert(self._record(outcome.action, checksum)))
                    applied.append(outcome.action)

        for action in plan.actions:
            if action.action == "skip" and action.drop_record:
                self._commit(self._registry.remove(*action.key))
                skipped.append(action)
            elif action.action == "skip" and action.refresh_record:
                target_checksum = action.target_checksum or UNKNOWN_CHECKSUM
                self._commit(self._registry.upsert(self._record(action, target_checksum)))
                skipped.append(action)
            elif action.action == "skip" or (
                action.action == "conflict" and not action.writes_file
            ):
                skipped.append(action)

        registry = self._registry.with_last_reconciled(self._time.now_iso())
        if plan.manifest_version is not None and not migration_failed:
            registry = registry.with_applied_manifest_version(
                max_version(registry.applied_manifest_version, plan.manifest_version)
            )
        self._commit(registry)

        logger.debug(
            "Applied %d, skipped %d, failed %d actions", len(applied), len(skipped), len(failed)
        )
        return ExecutionResult(applied=applied, skipped=skipped, failed=failed)

    def _commit(self, registry: InstallationRegistry) -> None:
        self._registry = registry
        self._persist(registry)

    def _delete(self, action: ReconcileAction) -> None:
        path = Path(action.path)

        @retry_with_backoff(time=self._time, label=action.path)
        def remove() -> None:
            try:
                self._fs.remove_file(path)
            except FileNotFoundError:
                logger.debug("%s already gone", path)

        remove()
        prune_empty_parents(path, stop_at=self._scope_root, fs=self._fs)

    def _run_writes(self, actions: list[ReconcileAction]) -> Iterator[_WriteOutcome]:
        """Yield write outcomes as each path finishes."""
        groups: dict[str, list[ReconcileAction]] = {}
        for action in actions:
            groups.setdefault(action.path, []).append(action)
        if not groups:
            return

        workers = max(1, min(self._max_workers, len(groups)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_path = {
                executor.submit(self._write_group, group): path for path, group in groups.items()
            }
            for future in as_completed(future_to_path):
                yield from future.result()

    def _write_group(self, actions: list[ReconcileAction]) -> list[_WriteOutcome]:
        outcomes: list[_WriteOutcome] = []
        for action in actions:
            try:
                checksum = self._write(action)
            except (OSError, KitsyncError) as e:
                logger.warning("Failed to write %s: %s", action.path, e)
                outcomes.append(_WriteOutcome(action=action, error=str(e)))
                continue
            outcomes.append(_WriteOutcome(action=action, target_checksum=checksum))
        return outcomes

    def _write(self, action: ReconcileAction) -> str:
        path = Path(action.path)
        content = action.content if action.content is not None else ""
        if action.resolution == "backup" and path.is_file() and not path.is_symlink():
            self._backup(path)

        @retry_with_backoff(time=self._time, label=action.path)
        def write() -> None:
            if path.is_symlink():
                # Never write through a link to somewhere outside the scope
                self._fs.remove_file(path)
            self._fs.write_text(path, content)

        write()
        if path.is_file():
            return hash_file(path)
        # Nothing reached the disk (dry-run filesystem)
        return action.source_checksum or UNKNOWN_CHECKSUM

    def _backup(self, path: Path) -> None:
        stamp = self._time.now().strftime("%Y%m%dT%H%M%S%fZ")
        backup = backup_path_for(path, stamp)

        @retry_with_backoff(time=self._time, label=str(backup))
        def copy() -> None:
            self._fs.copy_file(path, backup)

        copy()
        logger.info("Backed up %s to %s", path, backup.name)

    def _record(self, action: ReconcileAction, target_checksum: str) -> InstallationRecord:
        now = self._time.now_iso()
        existing = self._registry.find(*action.key)
        values = {
            "path": action.path,
            "source_path": action.source_path or "",
            "source_checksum": action.source_checksum or UNKNOWN_CHECKSUM,
            "target_checksum": target_checksum,
        }
        if existing is not None and existing.path == action.path:
            if action.writes_file:
                values["installed_at"] = now
            return existing.model_copy(update=values)
        return InstallationRecord(
            item=action.item,
            type=action.type,
            provider=action.provider,
            global_=action.global_,
            installed_at=now,
            install_source="kit",
            **values,
        )
