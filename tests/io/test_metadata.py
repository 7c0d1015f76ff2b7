"""Tests for the legacy metadata.json ledger."""

import json
from pathlib import Path

from kitsync.io.metadata import (
    load_metadata,
    metadata_path,
    migrate_metadata,
    remove_metadata,
)
from kitsync.models.metadata import LegacyMetadata, MultiKitMetadata, upgrade_metadata

LEGACY = {
    "name": "engineer",
    "version": "1.4.0",
    "installedAt": "2024-05-01T00:00:00Z",
    "scope": "local",
    "installedFiles": ["agents/planner.md"],
    "files": [
        {"path": "agents\\planner.md", "checksum": "a" * 64, "ownership": "ck"},
        {"path": "agents/mine.md", "checksum": "b" * 64, "ownership": "user"},
    ],
    "customField": "kept",
}


def _write(root: Path, data: object) -> None:
    metadata_path(root).write_text(json.dumps(data), encoding="utf-8")


def test_legacy_document_parses_as_legacy(tmp_path: Path) -> None:
    _write(tmp_path, LEGACY)

    metadata = load_metadata(tmp_path)

    assert isinstance(metadata, LegacyMetadata)
    assert metadata.kit_name == "engineer"
    assert metadata.files[0].path == "agents/planner.md"
    assert metadata.files[0].ownership == "tool"


def test_multi_kit_document_parses_as_multi_kit(tmp_path: Path) -> None:
    _write(
        tmp_path,
        {
            "kits": {
                "engineer": {
                    "version": "2.0.0",
                    "installedAt": "2025-01-01T00:00:00Z",
                    "files": [{"path": "agents/planner.md", "checksum": "a" * 64}],
                }
            }
        },
    )

    metadata = load_metadata(tmp_path)

    assert isinstance(metadata, MultiKitMetadata)
    assert [f.path for f in metadata.files_for_kit("engineer")] == ["agents/planner.md"]


def test_upgrade_keeps_legacy_fields() -> None:
    legacy = LegacyMetadata.model_validate(LEGACY)

    upgraded = upgrade_metadata(legacy, now="2025-01-01T00:00:00Z")
    data = upgraded.to_dict()

    assert list(upgraded.kits) == ["engineer"]
    assert upgraded.kits["engineer"].version == "1.4.0"
    assert data["name"] == "engineer"
    assert data["installedFiles"] == ["agents/planner.md"]
    assert data["customField"] == "kept"


def test_upgrade_is_idempotent() -> None:
    once = upgrade_metadata(LegacyMetadata.model_validate(LEGACY), now="2025-01-01T00:00:00Z")

    assert upgrade_metadata(once, now="2030-01-01T00:00:00Z") == once


def test_unnamed_legacy_kit_is_called_default() -> None:
    legacy = LegacyMetadata.model_validate({"version": "1.0.0", "files": []})

    upgraded = upgrade_metadata(legacy, now="2025-01-01T00:00:00Z")

    assert list(upgraded.kits) == ["default"]


def test_migrate_rewrites_legacy_once(tmp_path: Path) -> None:
    _write(tmp_path, LEGACY)

    first = migrate_metadata(tmp_path, now="2025-01-01T00:00:00Z")
    second = migrate_metadata(tmp_path, now="2025-01-01T00:00:00Z")

    assert (first.from_format, first.migrated) == ("legacy", True)
    assert (second.from_format, second.migrated) == ("multi-kit", False)
    assert isinstance(load_metadata(tmp_path), MultiKitMetadata)


def test_migrate_without_metadata(tmp_path: Path) -> None:
    result = migrate_metadata(tmp_path, now="2025-01-01T00:00:00Z")

    assert (result.from_format, result.migrated) == ("none", False)


def test_corrupt_metadata_is_ignored(tmp_path: Path) -> None:
    metadata_path(tmp_path).write_text("[1, 2", encoding="utf-8")

    assert load_metadata(tmp_path) is None


def test_empty_metadata_is_ignored(tmp_path: Path) -> None:
    _write(tmp_path, {})

    assert load_metadata(tmp_path) is None


def test_remove_metadata(tmp_path: Path) -> None:
    _write(tmp_path, LEGACY)

    remove_metadata(tmp_path)
    remove_metadata(tmp_path)

    assert not metadata_path(tmp_path).exists()
