"""Data models for kitsync.

Import from submodules:
- artifact: ArtifactType, ARTIFACT_TYPES, SourceItem
- ownership: Ownership, OwnershipResult
- registry: InstallationRecord, InstallationRegistry
- manifest: MigrationManifest, RenameEntry, ProviderPathMigration, SectionRename
- plan: ReconcileAction, ReconcilePlan, PlanSummary, ExecutionResult
- metadata: TrackedFile, LegacyMetadata, MultiKitMetadata
- provider: ProviderConfig, ProviderTarget
"""
