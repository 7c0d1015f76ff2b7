"""Migration manifest loading and version gating."""

import logging
import posixpath
from collections.abc import Sequence
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Protocol, TypeVar

from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from kitsync.models.manifest import MigrationManifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "portable-manifest.json"


class _Gated(Protocol):
    @property
    def since(self) -> str: ...


E = TypeVar("E", bound=_Gated)


def load_migration_manifest(kit_dir: Path) -> MigrationManifest | None:
    """Load portable-manifest.json from a kit directory.

    Returns:
        The manifest, or None if absent or invalid
    """
    path = kit_dir / MANIFEST_FILENAME
    if not path.exists():
        logger.debug("No %s in %s; no migrations to apply", MANIFEST_FILENAME, kit_dir)
        return None

    try:
        manifest = MigrationManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable migration manifest %s: %s", path, e)
        return None

    logger.debug(
        "Loaded migration manifest %s (cli %s): %d renames, %d path migrations",
        manifest.version,
        manifest.cli_version,
        len(manifest.renames),
        len(manifest.provider_path_migrations),
    )
    return manifest


def applicable_entries(
    entries: Sequence[E], applied_version: str | None, current_version: str
) -> list[E]:
    """Select entries whose `since` lies in (applied_version, current_version].

    With no applied version every entry up to current_version applies. Any
    version that does not parse excludes the entry.
    """
    try:
        current = Version(current_version)
        applied = Version(applied_version) if applied_version else None
    except InvalidVersion as e:
        logger.warning("Skipping all migrations: %s", e)
        return []

    result: list[E] = []
    for entry in entries:
        try:
            since = Version(entry.since)
        except InvalidVersion:
            logger.warning("Skipping migration entry with invalid version %r", entry.since)
            continue
        if since > current:
            continue
        if applied is not None and since <= applied:
            continue
        result.append(entry)
    return result


def is_safe_relative_path(value: str) -> bool:
    """Return True if value is relative and has no parent-directory segment.

    Both separator styles are checked so a Windows-style path cannot slip a
    traversal past a POSIX host.
    """
    if not value:
        return False
    if PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute():
        return False
    if PureWindowsPath(value).drive:
        return False
    return ".." not in value.replace("\\", "/").split("/")


def normalize_relative_path(value: str) -> str:
    """Normalize a kit- or root-relative path to forward-slash form."""
    normalized = posixpath.normpath(value.replace("\\", "/"))
    if normalized == ".":
        return ""
    return normalized.removeprefix("./").strip("/")


def max_version(a: str | None, b: str | None) -> str | None:
    """Return the greater of two versions, ignoring ones that do not parse."""
    candidates: list[tuple[Version, str]] = []
    for value in (a, b):
        if value is None:
            continue
        try:
            candidates.append((Version(value), value))
        except InvalidVersion:
            continue
    if not candidates:
        return None
    return max(candidates)[1]
