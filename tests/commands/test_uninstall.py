"""Tests for the uninstall commands."""

import json
from pathlib import Path

from click.testing import CliRunner

from kitsync.cli import cli
from kitsync.context import KitsyncContext
from kitsync.io.checksum import hash_text
from kitsync.io.metadata import load_metadata, metadata_path
from kitsync.io.registry import load_registry
from kitsync.models.metadata import MultiKitMetadata
from tests.conftest import KitBuilder

KIT = {"agents/planner.md": "Plan.\n", "agents/reviewer.md": "Review.\n"}


def _install(cli_runner: CliRunner, ctx: KitsyncContext, kit: Path) -> None:
    result = cli_runner.invoke(cli, ["install", str(kit)], obj=ctx)
    assert result.exit_code == 0, result.output


def test_uninstall_removes_pristine_and_keeps_edits(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))
    edited = project / ".claude" / "agents" / "reviewer.md"
    edited.write_text("my review\n", encoding="utf-8")

    result = cli_runner.invoke(cli, ["uninstall"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "1 removed, 1 preserved, 0 failed" in result.stderr
    assert f"Preserved {edited} (modified by user)" in result.stderr
    assert not (project / ".claude" / "agents" / "planner.md").exists()
    assert edited.read_text() == "my review\n"
    assert [r.item for r in load_registry(project).installations] == ["reviewer"]


def test_uninstall_force_and_item_filter(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))
    edited = project / ".claude" / "agents" / "reviewer.md"
    edited.write_text("my review\n", encoding="utf-8")

    result = cli_runner.invoke(
        cli, ["uninstall", "--item", "reviewer", "--force"], obj=kitsync_ctx
    )

    assert result.exit_code == 0, result.output
    assert not edited.exists()
    assert (project / ".claude" / "agents" / "planner.md").exists()


def test_uninstall_one_provider_keeps_shared_agents_md(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    kit = make_kit(KIT)
    installed = cli_runner.invoke(
        cli, ["install", str(kit), "-p", "codex", "-p", "goose"], obj=kitsync_ctx
    )
    assert installed.exit_code == 0, installed.output

    result = cli_runner.invoke(cli, ["uninstall", "-p", "codex"], obj=kitsync_ctx)

    agents_md = project / "AGENTS.md"
    assert result.exit_code == 0, result.output
    assert f"Preserved {agents_md} (shared with goose)" in result.stderr
    assert agents_md.is_file()
    assert [r.provider for r in load_registry(project).installations] == ["goose"]

    replanned = cli_runner.invoke(cli, ["plan", str(kit), "-p", "goose"], obj=kitsync_ctx)
    assert replanned.exit_code == 0, replanned.output
    assert "0 conflicts" in replanned.output


def test_uninstall_dry_run(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))

    result = cli_runner.invoke(cli, ["uninstall", "--dry-run"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "Would remove" in result.stderr
    assert (project / ".claude" / "agents" / "planner.md").exists()
    assert len(load_registry(project).installations) == 2


def test_uninstall_with_empty_registry(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext
) -> None:
    result = cli_runner.invoke(cli, ["uninstall"], obj=kitsync_ctx)

    assert result.exit_code == 0
    assert "Nothing to uninstall" in result.stderr


def test_uninstall_legacy_upgrades_ledger(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, project: Path
) -> None:
    root = project / ".claude"
    (root / "agents").mkdir(parents=True)
    (root / "agents" / "planner.md").write_text("kit\n", encoding="utf-8")
    (root / "agents" / "mine.md").write_text("mine\n", encoding="utf-8")
    metadata_path(root).write_text(
        json.dumps(
            {
                "name": "engineer",
                "version": "1.0.0",
                "files": [
                    {"path": "agents/planner.md", "checksum": hash_text("kit\n")},
                    {"path": "agents/mine.md", "checksum": hash_text("x"), "ownership": "user"},
                ],
            }
        ),
        encoding="utf-8",
    )

    result = cli_runner.invoke(cli, ["uninstall-legacy", str(root)], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "1 removed, 1 preserved, 0 failed" in result.stderr
    assert (root / "agents" / "mine.md").exists()
    metadata = load_metadata(root)
    assert isinstance(metadata, MultiKitMetadata)
    assert [f.path for f in metadata.files_for_kit("engineer")] == ["agents/mine.md"]


def test_uninstall_legacy_without_ledger(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, project: Path
) -> None:
    result = cli_runner.invoke(cli, ["uninstall-legacy", str(project)], obj=kitsync_ctx)

    assert result.exit_code == 1
    assert isinstance(result.exception, FileNotFoundError)
    assert "No kit metadata found" in str(result.exception)
