"""Tests for checksum-based ownership classification."""

from functools import partial
from pathlib import Path

from kitsync.io.checksum import hash_text
from kitsync.models.metadata import LegacyMetadata
from kitsync.models.ownership import Ownership
from kitsync.models.registry import UNKNOWN_CHECKSUM
from kitsync.operations.ownership import classify_batch, classify_file, classify_tracked_file


def test_missing_file_is_user_owned_and_absent(tmp_path: Path) -> None:
    result = classify_file(tmp_path / "gone.md", hash_text("x"))

    assert result.ownership is Ownership.USER_OWNED
    assert not result.exists


def test_untracked_file_is_user_owned(tmp_path: Path) -> None:
    path = tmp_path / "mine.md"
    path.write_text("mine", encoding="utf-8")

    result = classify_file(path, None)

    assert result.ownership is Ownership.USER_OWNED
    assert result.exists
    assert not result.allows_removal(force=True)


def test_matching_checksum_is_pristine(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("kit", encoding="utf-8")

    result = classify_file(path, hash_text("kit"))

    assert result.ownership is Ownership.TOOL_PRISTINE
    assert result.allows_removal(force=False)


def test_changed_file_is_modified(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("edited", encoding="utf-8")

    result = classify_file(path, hash_text("kit"))

    assert result.ownership is Ownership.TOOL_MODIFIED
    assert result.actual_checksum == hash_text("edited")
    assert not result.allows_removal(force=False)
    assert result.allows_removal(force=True)


def test_unknown_checksum_is_treated_as_modified(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("kit", encoding="utf-8")

    assert classify_file(path, UNKNOWN_CHECKSUM).ownership is Ownership.TOOL_MODIFIED


def test_symlink_is_user_owned(tmp_path: Path) -> None:
    real = tmp_path / "real.md"
    real.write_text("kit", encoding="utf-8")
    link = tmp_path / "link.md"
    link.symlink_to(real)

    result = classify_file(link, hash_text("kit"))

    assert result.ownership is Ownership.USER_OWNED
    assert result.exists


def test_tracked_file_uses_ledger(tmp_path: Path) -> None:
    (tmp_path / "agents").mkdir()
    ours = tmp_path / "agents" / "ours.md"
    ours.write_text("kit", encoding="utf-8")
    theirs = tmp_path / "agents" / "theirs.md"
    theirs.write_text("kit", encoding="utf-8")
    metadata = LegacyMetadata.model_validate(
        {
            "files": [
                {"path": "agents/ours.md", "checksum": hash_text("kit")},
                {"path": "agents/theirs.md", "checksum": hash_text("kit"), "ownership": "user"},
            ]
        }
    )

    assert classify_tracked_file(ours, tmp_path, metadata).ownership is Ownership.TOOL_PRISTINE
    assert classify_tracked_file(theirs, tmp_path, metadata).ownership is Ownership.USER_OWNED
    assert classify_tracked_file(ours, tmp_path, None).ownership is Ownership.USER_OWNED


def test_classify_batch_covers_every_path(tmp_path: Path) -> None:
    paths = []
    for index in range(10):
        path = tmp_path / f"{index}.md"
        path.write_text(str(index), encoding="utf-8")
        paths.append(path)

    results = classify_batch(
        paths + paths[:3], partial(classify_file, expected_checksum=hash_text("0")), max_workers=4
    )

    assert set(results) == set(paths)
    assert results[paths[0]].ownership is Ownership.TOOL_PRISTINE
    assert results[paths[1]].ownership is Ownership.TOOL_MODIFIED


def test_classify_batch_empty() -> None:
    assert classify_batch([], partial(classify_file, expected_checksum=None), max_workers=4) == {}
