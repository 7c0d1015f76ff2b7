"""Tests for the install and plan commands."""

import json
from pathlib import Path

from click.testing import CliRunner

from kitsync.cli import cli
from kitsync.context import KitsyncContext
from kitsync.io.registry import load_registry, registry_path
from tests.conftest import KitBuilder

KIT = {
    "agents/planner.md": "---\ndescription: Plans work\n---\nPlan.\n",
    "skills/brainstorm/SKILL.md": "Think.\n",
}


def test_install_then_reinstall_is_a_no_op(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    kit = make_kit(KIT)

    first = cli_runner.invoke(cli, ["install", str(kit)], obj=kitsync_ctx)
    second = cli_runner.invoke(cli, ["install", str(kit)], obj=kitsync_ctx)

    assert first.exit_code == 0, first.output
    assert "Install (2):" in first.stderr
    assert "2 to install, 0 to update, 0 conflicts, 0 to delete, 0 unchanged" in first.stderr
    assert "Applied 2, skipped 0" in first.stderr
    assert (project / ".claude" / "skills" / "brainstorm" / "SKILL.md").is_file()
    assert second.exit_code == 0, second.output
    assert "0 to install, 0 to update, 0 conflicts, 0 to delete, 2 unchanged" in second.stderr


def test_dry_run_changes_nothing(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    kit = make_kit(KIT)

    result = cli_runner.invoke(cli, ["install", str(kit), "--dry-run"], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "Dry run: no changes made" in result.stderr
    assert not (project / ".claude").exists()
    assert not registry_path(project).exists()


def test_plan_json_matches_install_dry_run(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder
) -> None:
    kit = make_kit(KIT)

    planned = cli_runner.invoke(cli, ["plan", str(kit), "--json"], obj=kitsync_ctx)
    dry_run = cli_runner.invoke(
        cli, ["install", str(kit), "--dry-run", "--json"], obj=kitsync_ctx
    )

    assert planned.exit_code == 0, planned.output
    assert planned.stdout == dry_run.stdout
    data = json.loads(planned.stdout)
    assert data["summary"] == {"install": 2, "update": 0, "skip": 0, "conflict": 0, "delete": 0}
    assert {a["item"] for a in data["actions"]} == {"planner", "brainstorm"}
    assert all(a["global"] is False for a in data["actions"])


def test_plan_then_install_executes_the_same_plan(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    kit = make_kit(KIT)
    result = cli_runner.invoke(cli, ["plan", str(kit), "--json"], obj=kitsync_ctx)
    planned = json.loads(result.stdout)

    cli_runner.invoke(cli, ["install", str(kit)], obj=kitsync_ctx)

    recorded = {r.path for r in load_registry(project).installations}
    assert recorded == {a["path"] for a in planned["actions"]}


def test_global_install_for_explicit_provider(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, home: Path
) -> None:
    kit = make_kit(KIT)

    result = cli_runner.invoke(
        cli, ["install", str(kit), "--global", "-p", "codex"], obj=kitsync_ctx
    )

    assert result.exit_code == 0, result.output
    assert "into global scope for: codex" in result.stderr
    assert (home / ".codex" / "skills" / "brainstorm" / "SKILL.md").is_file()
    assert (home / ".codex" / "AGENTS.md").is_file()
    assert load_registry(home).applied_manifest_version is None


def test_conflicts_are_reported_and_kept(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder, project: Path
) -> None:
    target = project / ".claude" / "agents" / "planner.md"
    target.parent.mkdir(parents=True)
    target.write_text("mine\n", encoding="utf-8")

    result = cli_runner.invoke(cli, ["install", str(make_kit(KIT))], obj=kitsync_ctx)

    assert result.exit_code == 0, result.output
    assert "Conflict (1):" in result.stderr
    assert "planner (claude-code) - untracked file at target path [keep]" in result.stderr
    assert target.read_text() == "mine\n"


def test_unknown_provider_is_rejected(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, make_kit: KitBuilder
) -> None:
    result = cli_runner.invoke(cli, ["install", str(make_kit(KIT)), "-p", "vim"], obj=kitsync_ctx)

    assert result.exit_code == 1
    assert isinstance(result.exception, ValueError)


def test_missing_kit_dir_is_a_usage_error(
    cli_runner: CliRunner, kitsync_ctx: KitsyncContext, tmp_path: Path
) -> None:
    result = cli_runner.invoke(cli, ["install", str(tmp_path / "nope")], obj=kitsync_ctx)

    assert result.exit_code == 2
    assert "does not exist" in result.stderr
