"""Status command: show what the registry tracks and whether it is intact."""

from collections import Counter
from pathlib import Path

import click

from kitsync.cli.output import machine_output, user_output
from kitsync.context_helpers import require_context
from kitsync.io.registry import load_registry, registry_path
from kitsync.models.ownership import Ownership
from kitsync.operations.ownership import classify_batch, classify_record


@click.command()
@click.option("--global", "-g", "global_", is_flag=True, help="Show the home directory scope")
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON")
@click.pass_context
def status(ctx: click.Context, global_: bool, as_json: bool) -> None:
    """Show installed items and their ownership state."""
    kitsync_ctx = require_context(ctx)
    config = kitsync_ctx.load_config(global_=global_)
    scope_root = kitsync_ctx.scope_root(global_)

    registry = load_registry(scope_root)
    records = registry.for_scope(global_)
    by_path = {Path(r.path): r for r in records}
    results = classify_batch(
        by_path,
        lambda path: classify_record(by_path[path], path),
        max_workers=config.worker_count,
    )

    def state(path: Path) -> str:
        result = results[path]
        if not result.exists:
            return "missing"
        return result.ownership.value

    if as_json:
        machine_output(
            {
                "registry": str(registry_path(scope_root)),
                "appliedManifestVersion": registry.applied_manifest_version,
                "lastReconciled": registry.last_reconciled,
                "installations": [
                    {**r.model_dump(mode="json", by_alias=True), "state": state(Path(r.path))}
                    for r in records
                ],
            }
        )
        return

    if not records:
        user_output(f"No installations recorded in {registry_path(scope_root)}")
        return

    user_output(f"Registry: {registry_path(scope_root)}")
    if registry.applied_manifest_version is not None:
        user_output(f"Applied manifest version: {registry.applied_manifest_version}")
    if registry.last_reconciled is not None:
        user_output(f"Last reconciled: {registry.last_reconciled}")

    for record in sorted(records, key=lambda r: (r.provider, r.type, r.item)):
        label = state(Path(record.path))
        if label == Ownership.TOOL_MODIFIED.value:
            label = click.style(label, fg="yellow")
        elif label == "missing":
            label = click.style(label, fg="red")
        user_output(f"  {record.provider} {record.type} {record.item}: {label}")

    counts = Counter(state(Path(r.path)) for r in records)
    user_output(", ".join(f"{count} {name}" for name, count in sorted(counts.items())))
