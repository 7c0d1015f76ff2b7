"""Idempotent removal primitives and standalone-skill cleanup.

backup_then_remove() is a two-phase delete: copy to a backup location, then
remove. If a run is interrupted between the phases, the next run finds the
backup already present and only finishes the removal, so an earlier
snapshot is never overwritten.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kitsync.errors import UnsafePathError
from kitsync.integrations.filesystem import Filesystem
from kitsync.io.metadata import load_metadata
from kitsync.models.metadata import LegacyMetadata, MultiKitMetadata
from kitsync.models.ownership import Ownership
from kitsync.operations.ownership import classify_tracked_file

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"
BACKUP_DIR = Path(".kitsync") / "backups"


class RemovalState(Enum):
    REMOVED = "removed"
    # Backup found from an interrupted run; only the removal was performed
    RESUMED = "resumed"
    ABSENT = "absent"


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def ensure_within(path: Path, root: Path) -> None:
    """Reject paths whose real location escapes root.

    Raises:
        UnsafePathError: If path resolves outside root
    """
    if not path.resolve().is_relative_to(root.resolve()):
        raise UnsafePathError(str(path), str(root))


def backup_then_remove(path: Path, backup_path: Path, *, fs: Filesystem) -> RemovalState:
    """Snapshot a file or directory tree to backup_path, then remove it."""
    if not _exists(path):
        return RemovalState.ABSENT

    is_dir = path.is_dir() and not path.is_symlink()
    if _exists(backup_path):
        logger.debug("Backup already present at %s; finishing removal of %s", backup_path, path)
        state = RemovalState.RESUMED
    else:
        if is_dir:
            fs.copy_tree(path, backup_path)
        else:
            fs.copy_file(path, backup_path)
        state = RemovalState.REMOVED

    if is_dir:
        fs.remove_tree(path)
    else:
        fs.remove_file(path)
    return state


def prune_empty_parents(path: Path, *, stop_at: Path, fs: Filesystem) -> list[Path]:
    """Remove now-empty parent directories of path, up to but excluding stop_at.

    Symlinked directories are never entered or removed.
    """
    removed: list[Path] = []
    current = path.parent
    while current != stop_at and current.is_relative_to(stop_at):
        if current.is_symlink() or not current.is_dir():
            break
        if any(current.iterdir()):
            break
        fs.remove_empty_dir(current)
        removed.append(current)
        current = current.parent
    return removed


@dataclass(frozen=True)
class SkillCleanupResult:
    removed: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    backup_dir: Path | None = None


def list_skill_dirs(directory: Path) -> set[str]:
    """Names of subdirectories that contain a SKILL.md."""
    if not directory.is_dir():
        return set()
    return {
        entry.name
        for entry in directory.iterdir()
        if entry.is_dir() and not entry.is_symlink() and (entry / SKILL_FILENAME).is_file()
    }


def _skill_is_ours(
    claude_dir: Path, skill_dir: Path, metadata: LegacyMetadata | MultiKitMetadata | None
) -> bool:
    """False if any file of the skill is user-owned or user-modified."""
    prefix = f"skills/{skill_dir.name}/"
    tracked: set[str] = set()
    if metadata is not None:
        tracked = {f.path for f in metadata.all_files() if f.path.startswith(prefix)}

    for path in sorted(p for p in skill_dir.rglob("*") if p.is_file() or p.is_symlink()):
        relative = path.relative_to(claude_dir).as_posix()
        if tracked and relative not in tracked:
            return False
        if not tracked:
            continue
        result = classify_tracked_file(path, claude_dir, metadata)
        match result.ownership:
            case Ownership.TOOL_PRISTINE:
                continue
            case Ownership.TOOL_MODIFIED | Ownership.USER_OWNED:
                return False
    return True


def cleanup_standalone_skills(
    claude_dir: Path, plugin_skills_dir: Path, *, fs: Filesystem
) -> SkillCleanupResult:
    """Remove standalone skills that a plugin now provides.

    A standalone skill under <claude_dir>/skills is removed when a skill of
    the same name exists in plugin_skills_dir, unless the ledger shows any of
    its files as user-owned or modified. Skills the ledger does not know
    about are removed too; every removal is backed up first under
    <claude_dir>/.kitsync/backups/skills/<name>.
    """
    standalone_dir = claude_dir / "skills"
    backup_root = claude_dir / BACKUP_DIR / "skills"
    overlaps = sorted(list_skill_dirs(standalone_dir) & list_skill_dirs(plugin_skills_dir))
    if not overlaps:
        return SkillCleanupResult(backup_dir=backup_root)

    metadata = load_metadata(claude_dir)
    removed: list[str] = []
    preserved: list[str] = []
    failed: list[str] = []

    for name in overlaps:
        skill_dir = standalone_dir / name
        if not _skill_is_ours(claude_dir, skill_dir, metadata):
            logger.debug("Preserving standalone skill %s (user-owned or modified)", name)
            preserved.append(name)
            continue
        try:
            state = backup_then_remove(skill_dir, backup_root / name, fs=fs)
        except OSError as e:
            logger.warning("Could not remove standalone skill %s: %s", name, e)
            failed.append(name)
            continue
        logger.debug("Standalone skill %s: %s", name, state.value)
        removed.append(name)

    return SkillCleanupResult(
        removed=removed, preserved=preserved, failed=failed, backup_dir=backup_root
    )
