"""Legacy metadata.json ledger I/O."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from kitsync.models.metadata import (
    LegacyMetadata,
    MultiKitMetadata,
    parse_metadata,
    upgrade_metadata,
)

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"

MetadataFormat = Literal["none", "legacy", "multi-kit"]


@dataclass(frozen=True)
class MetadataMigrationResult:
    from_format: MetadataFormat
    migrated: bool


def metadata_path(install_root: Path) -> Path:
    return install_root / METADATA_FILENAME


def load_metadata(install_root: Path) -> LegacyMetadata | MultiKitMetadata | None:
    """Read metadata.json in either shape.

    Returns:
        The parsed ledger, or None if absent, unreadable, or empty
    """
    path = metadata_path(install_root)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        metadata = parse_metadata(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable metadata %s: %s", path, e)
        return None

    if isinstance(metadata, LegacyMetadata) and metadata.is_empty:
        logger.warning("Ignoring metadata %s: no kits, name, version, or files", path)
        return None
    return metadata


def save_metadata(install_root: Path, metadata: MultiKitMetadata) -> None:
    """Write metadata.json atomically."""
    path = metadata_path(install_root)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".json.tmp")
    with temp_path.open("w", encoding="utf-8") as f:
        json.dump(metadata.to_dict(), f, indent=2)
        f.write("\n")

    temp_path.replace(path)


def migrate_metadata(install_root: Path, *, now: str) -> MetadataMigrationResult:
    """Upgrade a legacy ledger on disk to the multi-kit shape.

    Safe to call repeatedly; only a legacy document is rewritten.
    """
    metadata = load_metadata(install_root)
    match metadata:
        case None:
            return MetadataMigrationResult(from_format="none", migrated=False)
        case MultiKitMetadata():
            return MetadataMigrationResult(from_format="multi-kit", migrated=False)
        case LegacyMetadata():
            upgraded = upgrade_metadata(metadata, now=now)
            save_metadata(install_root, upgraded)
            logger.info(
                "Migrated %s to multi-kit format (kit %r)",
                metadata_path(install_root),
                metadata.kit_name,
            )
            return MetadataMigrationResult(from_format="legacy", migrated=True)


def remove_metadata(install_root: Path) -> None:
    path = metadata_path(install_root)
    if path.exists():
        path.unlink()
