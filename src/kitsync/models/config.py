"""Configuration models for kitsync."""

import os
from dataclasses import dataclass, replace

from kitsync.models.plan import ConflictResolution


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class KitsyncConfig:
    """User configuration from kitsync.toml.

    `providers` is None when the file does not name any, meaning "detect".
    """

    providers: list[str] | None = None
    on_modified: ConflictResolution = "keep"
    on_untracked: ConflictResolution = "keep"
    max_workers: int = 0

    @property
    def worker_count(self) -> int:
        return self.max_workers if self.max_workers > 0 else default_max_workers()

    def with_force(self) -> "KitsyncConfig":
        """Return config with --force applied.

        A foreign file at a target path is snapshotted rather than destroyed.
        """
        on_modified: ConflictResolution = (
            "overwrite" if self.on_modified == "keep" else self.on_modified
        )
        on_untracked: ConflictResolution = (
            "backup" if self.on_untracked == "keep" else self.on_untracked
        )
        return replace(self, on_modified=on_modified, on_untracked=on_untracked)
