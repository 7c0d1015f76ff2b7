"""Installation registry persistence.

One registry per scope root (the project directory or the user's home).
Reads never fail: a missing, unreadable, or unrecognized registry is treated
as empty so every file on disk defaults to user-owned. Writes go to a
temporary file first and then replace the real one.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kitsync.io.checksum import hash_file
from kitsync.models.registry import (
    REGISTRY_VERSION,
    UNKNOWN_CHECKSUM,
    InstallationRecord,
    InstallationRegistry,
)

logger = logging.getLogger(__name__)

REGISTRY_DIR = ".kitsync"
REGISTRY_FILENAME = "registry.json"


def registry_path(scope_root: Path) -> Path:
    return scope_root / REGISTRY_DIR / REGISTRY_FILENAME


def load_registry(scope_root: Path) -> InstallationRegistry:
    """Load the registry for a scope root.

    Older registry versions are upgraded in memory; the upgraded form is
    written back the next time the registry is saved.

    Returns:
        The registry, or an empty registry if absent or unreadable
    """
    path = registry_path(scope_root)
    if not path.exists():
        return InstallationRegistry.empty()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable registry %s: %s", path, e)
        return InstallationRegistry.empty()

    if not isinstance(data, dict):
        logger.warning("Ignoring registry %s: expected a JSON object", path)
        return InstallationRegistry.empty()

    try:
        return parse_registry(data)
    except (ValidationError, ValueError, KeyError, TypeError) as e:
        logger.warning("Ignoring invalid registry %s: %s", path, e)
        return InstallationRegistry.empty()


def parse_registry(data: dict[str, Any]) -> InstallationRegistry:
    """Parse a registry document of any known version.

    Raises:
        ValueError: If the version is not recognized
        pydantic.ValidationError: If the document does not match its version
    """
    version = data.get("version")
    if version == "1.0":
        data = upgrade_v1_to_v2(data)
        version = data["version"]
    if version == "2.0":
        data = upgrade_v2_to_v3(data)
        version = data["version"]
    if version != REGISTRY_VERSION:
        raise ValueError(f"unsupported registry version: {version!r}")
    return InstallationRegistry.model_validate(data)


def upgrade_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    """Convert skill-only rows (`skill`, `agent`) into typed rows."""
    installations = []
    for row in data.get("installations", []):
        upgraded = {k: v for k, v in row.items() if k not in ("skill", "agent")}
        upgraded["item"] = row["skill"]
        upgraded["type"] = "skill"
        upgraded["provider"] = row["agent"]
        installations.append(upgraded)
    return {**data, "version": "2.0", "installations": installations}


def upgrade_v2_to_v3(data: dict[str, Any]) -> dict[str, Any]:
    """Add checksum tracking to rows written before it existed.

    The target checksum is taken from the file currently on disk. The source
    checksum cannot be recovered, so it stays unknown until the next
    reconcile refreshes it.
    """
    installations = []
    for row in data.get("installations", []):
        upgraded = dict(row)
        upgraded.setdefault("sourceChecksum", UNKNOWN_CHECKSUM)
        upgraded.setdefault("targetChecksum", _disk_checksum(Path(row.get("path", ""))))
        upgraded.setdefault("installSource", "kit")
        installations.append(upgraded)
    return {**data, "version": REGISTRY_VERSION, "installations": installations}


def _disk_checksum(path: Path) -> str:
    if not path.is_file():
        return UNKNOWN_CHECKSUM
    try:
        return hash_file(path)
    except OSError as e:
        logger.debug("Could not hash %s during registry upgrade: %s", path, e)
        return UNKNOWN_CHECKSUM


def save_registry(scope_root: Path, registry: InstallationRegistry) -> None:
    """Save the registry atomically.

    Creates the registry directory if needed.
    """
    path = registry_path(scope_root)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".json.tmp")
    with temp_path.open("w", encoding="utf-8") as f:
        json.dump(registry.to_dict(), f, indent=2)
        f.write("\n")

    temp_path.replace(path)


def prune_registry(
    registry: InstallationRegistry,
) -> tuple[InstallationRegistry, list[InstallationRecord]]:
    """Drop records whose target file no longer exists.

    Returns:
        Tuple of (pruned registry, removed records)
    """
    kept: list[InstallationRecord] = []
    removed: list[InstallationRecord] = []
    for record in registry.installations:
        if Path(record.path).exists():
            kept.append(record)
        else:
            removed.append(record)
    return registry.model_copy(update={"installations": kept}), removed
