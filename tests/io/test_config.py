"""Tests for kitsync.toml loading and writing."""

from pathlib import Path

import pytest

from kitsync.io.config import config_path, load_config, save_config
from kitsync.models.config import KitsyncConfig


def test_missing_config_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "kitsync.toml")

    assert config == KitsyncConfig()
    assert config.worker_count > 0


def test_config_values_are_read(tmp_path: Path) -> None:
    path = tmp_path / "kitsync.toml"
    path.write_text(
        'providers = ["codex", "claude-code"]\n'
        'on_modified = "backup"\n'
        'on_untracked = "overwrite"\n'
        "max_workers = 3\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.providers == ["codex", "claude-code"]
    assert config.on_modified == "backup"
    assert config.on_untracked == "overwrite"
    assert config.worker_count == 3


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ('on_modified = "merge"\n', "Invalid conflict policy"),
        ('providers = ["vim"]\n', "Unknown provider"),
        ("max_workers = -1\n", "max_workers"),
        ("colour = true\n", "Unknown key 'colour'"),
        ("providers = [\n", "Invalid TOML"),
    ],
)
def test_invalid_config_raises_value_error(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "kitsync.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_config(path)


def test_save_then_load(tmp_path: Path) -> None:
    path = config_path(project_root=tmp_path, home_dir=tmp_path / "home", global_=True)
    config = KitsyncConfig(providers=["cursor"], on_untracked="backup", max_workers=2)

    save_config(path, config)

    assert path == tmp_path / "home" / ".kitsync" / "config.toml"
    assert load_config(path) == config


def test_force_upgrades_keep_policies() -> None:
    forced = KitsyncConfig().with_force()

    assert forced.on_modified == "overwrite"
    assert forced.on_untracked == "backup"


def test_force_keeps_explicit_policies() -> None:
    forced = KitsyncConfig(on_modified="backup", on_untracked="overwrite").with_force()

    assert forced.on_modified == "backup"
    assert forced.on_untracked == "overwrite"
