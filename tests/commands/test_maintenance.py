"""Tests for status, config, registry and cleanup-skills commands."""

import json
import tomllib
from pathlib import Path

from click.testing import CliRunner

from kitsync.cli import cli
from kitsync.context import KitsyncContext
from kitsync.io.metadata import load_metadata, metadata_path
from kitsync.io.registry import load_registry
from kitsync.models.metadata import MultiKitMetadata
from tests.conftest import KitBuilder

KIT = {"agents/planner.md": "Plan.\n", "agents/reviewer.md": "Review.\n"}


def _install(cli_runner: CliRunner, ctx: KitsyncContext, kit: Path) -> None:
    result = cli_runner.invoke(cli, ["install", str(kit)], obj=ctx)
    assert result.exit_code == 0, result.output


def test_status_json_reports_ownership(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))
    (project / ".claude" / "agents" / "reviewer.md").write_text("mine\n", encoding="utf-8")

    result = cli_runner.invoke(cli, ["status", "--json"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["lastReconciled"] == "2025-01-01T12:00:00Z"
    states = {row["item"]: row["state"] for row in data["installations"]}
    assert states == {"planner": "tool", "reviewer": "tool-modified"}


def test_status_text(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))
    (project / ".claude" / "agents" / "planner.md").unlink()

    result = cli_runner.invoke(cli, ["status"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "claude-code agent planner: missing" in result.stderr
    assert "1 missing, 1 tool" in result.stderr


def test_status_empty(cli_runner: CliRunner, kitsync_ctx: KitsyncContext) -> None:
    result = cli_runner.invoke(cli, ["status"], obj=kitsync_ctx)

    assert result.exit_code == 0
    assert "No installations recorded" in result.stderr


def test_config_init_writes_detected_providers(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, project: Path, home: Path
) -> None:
    (home / ".codex").mkdir()

    result = cli_runner.invoke(cli, ["config", "init"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    data = tomllib.loads((project / "kitsync.toml").read_text(encoding="utf-8"))
    assert data["providers"] == ["codex"]
    assert data["on_modified"] == "keep"


def test_config_init_refuses_to_overwrite(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, project: Path
) -> None:
    (project / "kitsync.toml").write_text('on_modified = "backup"\n', encoding="utf-8")

    refused = cli_runner.invoke(cli, ["config", "init"], obj=kitsync_ctx)
    forced = cli_runner.invoke(cli, ["config", "init", "--force"], obj=kitsync_ctx)

    assert isinstance(refused.exception, FileExistsError)
    assert forced.exit_code == 0, forced.output
    assert "on_modified = \"keep\"" in (project / "kitsync.toml").read_text(encoding="utf-8")


def test_invalid_config_aborts_install(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    (project / "kitsync.toml").write_text('on_modified = "merge"\n', encoding="utf-8")

    result = cli_runner.invoke(cli, ["install", str(make_kit(KIT))], obj=kitsync_ctx)

    assert isinstance(result.exception, ValueError)
    assert not (project / ".claude").exists()


def test_registry_prune(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    _install(cli_runner, kitsync_ctx, make_kit(KIT))
    (project / ".claude" / "agents" / "planner.md").unlink()

    dry_run = cli_runner.invoke(cli, ["registry", "prune", "--dry-run"], obj=kitsync_ctx)
    assert len(load_registry(project).installations) == 2
    result = cli_runner.invoke(cli, ["registry", "prune"], obj=kitsync_ctx)

    assert "Would drop claude-code agent planner" in dry_run.stderr
    assert result.exit_code == 0, result.output
    assert "1 stale record(s)" in result.stderr
    assert [r.item for r in load_registry(project).installations] == ["reviewer"]


def test_cleanup_skills_command(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, tmp_path: Path
) -> None:
    claude_dir = tmp_path / ".claude"
    plugin = tmp_path / "plugin" / "skills"
    for root in (claude_dir / "skills", plugin):
        (root / "brainstorm").mkdir(parents=True)
        (root / "brainstorm" / "SKILL.md").write_text("Think.\n", encoding="utf-8")
    metadata_path(claude_dir).write_text(
        json.dumps({"name": "engineer", "version": "1.0.0", "files": []}), encoding="utf-8"
    )

    result = cli_runner.invoke(
        cli, ["cleanup-skills", str(claude_dir), str(plugin)], obj=kitsync_ctx
    )

    assert result.exit_code == 0, result.output
    assert "Removed skills/brainstorm" in result.stderr
    assert "to the multi-kit format" in result.stderr
    assert not (claude_dir / "skills" / "brainstorm").exists()
    assert (claude_dir / ".kitsync" / "backups" / "skills" / "brainstorm" / "SKILL.md").is_file()
    assert isinstance(load_metadata(claude_dir), MultiKitMetadata)


def test_cleanup_skills_dry_run(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, tmp_path: Path
) -> None:
    claude_dir = tmp_path / ".claude"
    plugin = tmp_path / "plugin" / "skills"
    for root in (claude_dir / "skills", plugin):
        (root / "brainstorm").mkdir(parents=True)
        (root / "brainstorm" / "SKILL.md").write_text("Think.\n", encoding="utf-8")

    result = cli_runner.invoke(
        cli, ["cleanup-skills", str(claude_dir), str(plugin), "--dry-run"], obj=kitsync_ctx
    )

    assert result.exit_code == 0, result.output
    assert "Would remove skills/brainstorm" in result.stderr
    assert (claude_dir / "skills" / "brainstorm" / "SKILL.md").is_file()
