"""Shared fixtures: scope roots, a kit tree builder, and a CLI runner."""

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from kitsync.context import KitsyncContext
from kitsync.integrations.time.fake import FakeTime

KitBuilder = Callable[[dict[str, str]], Path]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def home(tmp_path: Path) -> Path:
    root = tmp_path / "home"
    root.mkdir()
    return root


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def kitsync_ctx(project: Path, home: Path, fake_time: FakeTime) -> KitsyncContext:
    return KitsyncContext.for_test(time=fake_time, project_root=project, home_dir=home)


@pytest.fixture
def make_kit(tmp_path: Path) -> KitBuilder:
    """Write a kit tree from {kit-relative path: content}; returns the kit dir.

    Calling it again rewrites the same kit dir from scratch, which models
    a new kit release.
    """
    kit_dir = tmp_path / "kit"

    def build(files: dict[str, str]) -> Path:
        if kit_dir.exists():
            for path in sorted(kit_dir.rglob("*"), reverse=True):
                if path.is_file():
                    path.unlink()
                else:
                    path.rmdir()
        kit_dir.mkdir(exist_ok=True)
        for relative, content in files.items():
            path = kit_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return kit_dir

    return build


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
