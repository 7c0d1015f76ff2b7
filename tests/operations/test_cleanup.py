"""Tests for idempotent removal and standalone-skill cleanup."""

import json
from pathlib import Path

import pytest

from kitsync.errors import UnsafePathError
from kitsync.integrations.filesystem.real import RealFilesystem
from kitsync.io.checksum import hash_text
from kitsync.io.metadata import metadata_path
from kitsync.operations.cleanup import (
    RemovalState,
    backup_then_remove,
    cleanup_standalone_skills,
    ensure_within,
    prune_empty_parents,
)

FS = RealFilesystem()


def _skill(root: Path, name: str, content: str = "Think.\n") -> Path:
    path = root / name / "SKILL.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path.parent


def test_backup_then_remove_file(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("a", encoding="utf-8")
    backup = tmp_path / "backup" / "a.md"

    assert backup_then_remove(path, backup, fs=FS) is RemovalState.REMOVED
    assert not path.exists()
    assert backup.read_text() == "a"


def test_backup_then_remove_tree(tmp_path: Path) -> None:
    skill = _skill(tmp_path / "skills", "brainstorm")
    backup = tmp_path / "backup" / "brainstorm"

    assert backup_then_remove(skill, backup, fs=FS) is RemovalState.REMOVED
    assert not skill.exists()
    assert (backup / "SKILL.md").read_text() == "Think.\n"


def test_existing_backup_is_not_overwritten(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("newer", encoding="utf-8")
    backup = tmp_path / "a.md.bak"
    backup.write_text("original", encoding="utf-8")

    assert backup_then_remove(path, backup, fs=FS) is RemovalState.RESUMED
    assert not path.exists()
    assert backup.read_text() == "original"


def test_absent_path(tmp_path: Path) -> None:
    assert backup_then_remove(tmp_path / "gone", tmp_path / "b", fs=FS) is RemovalState.ABSENT
    assert not (tmp_path / "b").exists()


def test_prune_stops_at_non_empty_parent_and_root(tmp_path: Path) -> None:
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    (tmp_path / "a" / "keep.md").write_text("k", encoding="utf-8")

    removed = prune_empty_parents(deep / "file.md", stop_at=tmp_path, fs=FS)

    assert removed == [deep, tmp_path / "a" / "b"]
    assert (tmp_path / "a").is_dir()


def test_prune_never_removes_symlinked_dir(tmp_path: Path) -> None:
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real, target_is_directory=True)

    assert prune_empty_parents(link / "file.md", stop_at=tmp_path, fs=FS) == []
    assert link.is_symlink()


def test_ensure_within_rejects_escape(tmp_path: Path) -> None:
    ensure_within(tmp_path / "a" / "b", tmp_path)
    with pytest.raises(UnsafePathError):
        ensure_within(tmp_path / ".." / "elsewhere", tmp_path)


def test_overlapping_skills_are_backed_up_and_removed(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    plugin = tmp_path / "plugin" / "skills"
    _skill(claude_dir / "skills", "brainstorm")
    _skill(claude_dir / "skills", "standalone-only")
    _skill(plugin, "brainstorm")

    result = cleanup_standalone_skills(claude_dir, plugin, fs=FS)

    assert result.removed == ["brainstorm"]
    assert not (claude_dir / "skills" / "brainstorm").exists()
    assert (claude_dir / "skills" / "standalone-only").is_dir()
    assert result.backup_dir is not None
    assert (result.backup_dir / "brainstorm" / "SKILL.md").is_file()


def test_modified_or_untracked_skill_files_are_preserved(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    plugin = tmp_path / "plugin" / "skills"
    edited = _skill(claude_dir / "skills", "edited", "my edits\n")
    extra = _skill(claude_dir / "skills", "extra")
    (extra / "notes.md").write_text("mine", encoding="utf-8")
    _skill(claude_dir / "skills", "pristine")
    for name in ("edited", "extra", "pristine"):
        _skill(plugin, name)
    metadata_path(claude_dir).write_text(
        json.dumps(
            {
                "name": "engineer",
                "version": "1.0.0",
                "files": [
                    {"path": "skills/edited/SKILL.md", "checksum": hash_text("Think.\n")},
                    {"path": "skills/extra/SKILL.md", "checksum": hash_text("Think.\n")},
                    {"path": "skills/pristine/SKILL.md", "checksum": hash_text("Think.\n")},
                ],
            }
        ),
        encoding="utf-8",
    )

    result = cleanup_standalone_skills(claude_dir, plugin, fs=FS)

    assert result.removed == ["pristine"]
    assert result.preserved == ["edited", "extra"]
    assert (edited / "SKILL.md").read_text() == "my edits\n"


def test_no_overlap_is_a_no_op(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    _skill(claude_dir / "skills", "brainstorm")

    result = cleanup_standalone_skills(claude_dir, tmp_path / "missing", fs=FS)

    assert result.removed == []
    assert (claude_dir / "skills" / "brainstorm").is_dir()
