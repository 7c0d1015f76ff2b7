"""Operations for kitsync.

Import from submodules:
- ownership: classify_file, classify_record, classify_tracked_file, classify_batch
- probes: TargetProbe, probe_targets
- planner: ReconcileInput, reconcile
- executor: PlanExecutor
- retry: retry_with_backoff
- cleanup: backup_then_remove, prune_empty_parents, cleanup_standalone_skills
- uninstall: plan_registry_uninstall, apply_registry_uninstall, plan_legacy_uninstall,
  apply_legacy_uninstall
- sync: resolve_providers, compute_plan, apply_plan
"""
