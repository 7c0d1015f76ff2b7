"""Reconciliation plan and execution result models."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal, cast

from kitsync.models.artifact import ArtifactType
from kitsync.models.registry import RecordKey

ActionKind = Literal["install", "update", "skip", "conflict", "delete"]

# Presentation and sort order
ACTION_KINDS: tuple[ActionKind, ...] = ("install", "update", "conflict", "delete", "skip")

ConflictResolution = Literal["keep", "overwrite", "backup"]

CONFLICT_RESOLUTIONS: tuple[ConflictResolution, ...] = ("keep", "overwrite", "backup")

RENAMED_REASON = "Renamed"
PATH_MIGRATED_REASON = "Provider path migrated"
REMOVED_UPSTREAM_REASON = "removed upstream"


def validate_conflict_resolution(value: str) -> ConflictResolution:
    """Validate and return a conflict resolution policy.

    Raises:
        ValueError: If value is not a valid policy
    """
    if value not in CONFLICT_RESOLUTIONS:
        raise ValueError(
            f"Invalid conflict policy: {value} (expected one of keep, overwrite, backup)"
        )
    return cast(ConflictResolution, value)


@dataclass(frozen=True)
class ReconcileAction:
    """One decision produced by the planner.

    `path` is the resolved absolute target path. Install, update, conflict and
    adopting skips carry the rendered `content` plus the checksums the executor
    records; deletes carry `previous_item`/`previous_path` when migration
    driven.
    """

    action: ActionKind
    item: str
    type: ArtifactType
    provider: str
    global_: bool
    reason: str
    path: str
    source_path: str | None = None
    content: str | None = None
    source_checksum: str | None = None
    target_checksum: str | None = None
    previous_item: str | None = None
    previous_path: str | None = None
    resolution: ConflictResolution | None = None
    # Skip actions that still need the registry record written or refreshed
    refresh_record: bool = False
    # Skip actions whose registry record is removed while the file stays
    drop_record: bool = False

    @property
    def key(self) -> RecordKey:
        return (self.provider, self.type, self.item, self.global_)

    @property
    def is_migration(self) -> bool:
        return self.action == "delete" and self.reason.startswith(
            (RENAMED_REASON, PATH_MIGRATED_REASON)
        )

    @property
    def writes_file(self) -> bool:
        if self.action in ("install", "update"):
            return True
        return self.action == "conflict" and self.resolution in ("overwrite", "backup")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": self.action,
            "item": self.item,
            "type": self.type,
            "provider": self.provider,
            "global": self.global_,
            "reason": self.reason,
            "path": self.path,
        }
        if self.previous_item is not None:
            data["previousItem"] = self.previous_item
        if self.previous_path is not None:
            data["previousPath"] = self.previous_path
        if self.resolution is not None:
            data["resolution"] = self.resolution
        return data


@dataclass(frozen=True)
class PlanSummary:
    install: int = 0
    update: int = 0
    skip: int = 0
    conflict: int = 0
    delete: int = 0

    @staticmethod
    def from_actions(actions: list[ReconcileAction]) -> "PlanSummary":
        counts = Counter(a.action for a in actions)
        return PlanSummary(
            install=counts["install"],
            update=counts["update"],
            skip=counts["skip"],
            conflict=counts["conflict"],
            delete=counts["delete"],
        )

    @property
    def has_changes(self) -> bool:
        return self.install + self.update + self.conflict + self.delete > 0

    def to_dict(self) -> dict[str, int]:
        return {
            "install": self.install,
            "update": self.update,
            "skip": self.skip,
            "conflict": self.conflict,
            "delete": self.delete,
        }


@dataclass(frozen=True)
class ReconcilePlan:
    """Ordered, immutable set of actions for one reconcile run.

    `manifest_version` is the manifest version whose migrations were folded
    into this plan; the executor records it as applied once every migration
    delete succeeded.
    """

    actions: list[ReconcileAction]
    summary: PlanSummary
    manifest_version: str | None = None

    @staticmethod
    def from_actions(
        actions: list[ReconcileAction], manifest_version: str | None = None
    ) -> "ReconcilePlan":
        return ReconcilePlan(
            actions=actions,
            summary=PlanSummary.from_actions(actions),
            manifest_version=manifest_version,
        )

    def by_action(self, kind: ActionKind) -> list[ReconcileAction]:
        return [a for a in self.actions if a.action == kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "actions": [a.to_dict() for a in self.actions],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class ActionFailure:
    action: ReconcileAction
    error: str


@dataclass(frozen=True)
class ExecutionResult:
    applied: list[ReconcileAction] = field(default_factory=list)
    skipped: list[ReconcileAction] = field(default_factory=list)
    failed: list[ActionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
