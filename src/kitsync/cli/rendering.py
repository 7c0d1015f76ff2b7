"""Human-readable rendering of plans and execution results."""

import click

from kitsync.models.artifact import ARTIFACT_TYPE_LABELS, ARTIFACT_TYPES
from kitsync.models.plan import ACTION_KINDS, ActionKind, ExecutionResult, ReconcilePlan

MAX_ITEMS_PER_GROUP = 20

ACTION_LABELS: dict[ActionKind, str] = {
    "install": "Install",
    "update": "Update",
    "conflict": "Conflict",
    "delete": "Delete",
    "skip": "Skip",
}

ACTION_COLORS: dict[ActionKind, str] = {
    "install": "green",
    "update": "cyan",
    "conflict": "yellow",
    "delete": "red",
    "skip": "white",
}


def format_plan(plan: ReconcilePlan, *, show_skipped: bool = False) -> list[str]:
    """Plan lines grouped by action, then by artifact type.

    Each type group lists at most MAX_ITEMS_PER_GROUP actions followed by a
    "... and N more" line.
    """
    lines: list[str] = []
    for kind in ACTION_KINDS:
        if kind == "skip" and not show_skipped:
            continue
        actions = plan.by_action(kind)
        if not actions:
            continue

        header = f"{ACTION_LABELS[kind]} ({len(actions)}):"
        lines.append(click.style(header, fg=ACTION_COLORS[kind], bold=True))
        for artifact_type in ARTIFACT_TYPES:
            group = [a for a in actions if a.type == artifact_type]
            if not group:
                continue
            lines.append(f"  {ARTIFACT_TYPE_LABELS[artifact_type]}:")
            for action in group[:MAX_ITEMS_PER_GROUP]:
                detail = action.reason
                if action.resolution is not None and kind == "conflict":
                    detail = f"{detail} [{action.resolution}]"
                lines.append(f"    {action.item} ({action.provider}) - {detail}")
            hidden = len(group) - MAX_ITEMS_PER_GROUP
            if hidden > 0:
                lines.append(f"    ... and {hidden} more")
    return lines


def format_summary(plan: ReconcilePlan) -> str:
    s = plan.summary
    return (
        f"{s.install} to install, {s.update} to update, {s.conflict} conflicts, "
        f"{s.delete} to delete, {s.skip} unchanged"
    )


def format_result(result: ExecutionResult) -> list[str]:
    lines = [f"Applied {len(result.applied)}, skipped {len(result.skipped)}"]
    if result.failed:
        lines.append(click.style(f"Failed {len(result.failed)}:", fg="red", bold=True))
        for failure in result.failed:
            action = failure.action
            lines.append(f"  {action.action} {action.item} ({action.provider}): {failure.error}")
    return lines
