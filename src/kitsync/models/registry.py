"""Installation registry models.

The registry is the per-scope ledger of everything kitsync has written to
disk. Records are keyed by (provider, type, item, global); at most one record
exists per key. Unknown fields from newer or older writers are preserved so a
load/save round trip never drops data.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kitsync.models.artifact import ArtifactType, InstallSource

REGISTRY_VERSION = "3.0"

# Checksum placeholder for records written before checksum tracking existed
UNKNOWN_CHECKSUM = "unknown"

RecordKey = tuple[str, ArtifactType, str, bool]


class InstallationRecord(BaseModel):
    """One installed item for one provider in one scope."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    item: str
    type: ArtifactType
    provider: str
    global_: bool = Field(alias="global")
    path: str
    installed_at: str = Field(alias="installedAt")
    source_path: str = Field(alias="sourcePath")
    source_checksum: str = Field(default=UNKNOWN_CHECKSUM, alias="sourceChecksum")
    target_checksum: str = Field(default=UNKNOWN_CHECKSUM, alias="targetChecksum")
    install_source: InstallSource = Field(default="kit", alias="installSource")

    @field_validator("install_source", mode="before")
    @classmethod
    def upgrade_install_source(cls, v: Any) -> Any:
        # Earlier releases called hand-placed installs "manual"
        return "user" if v == "manual" else v

    @property
    def key(self) -> RecordKey:
        return (self.provider, self.type, self.item, self.global_)

    @property
    def has_source_checksum(self) -> bool:
        return self.source_checksum != UNKNOWN_CHECKSUM

    @property
    def has_target_checksum(self) -> bool:
        return self.target_checksum != UNKNOWN_CHECKSUM


class InstallationRegistry(BaseModel):
    """Versioned ledger of installations for a single scope.

    Frozen; mutators return a new registry so callers can hold a snapshot
    while the executor advances its own copy.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    version: str = REGISTRY_VERSION
    installations: list[InstallationRecord] = Field(default_factory=list)
    applied_manifest_version: str | None = Field(default=None, alias="appliedManifestVersion")
    last_reconciled: str | None = Field(default=None, alias="lastReconciled")

    @staticmethod
    def empty() -> "InstallationRegistry":
        return InstallationRegistry()

    def find(
        self, provider: str, type: ArtifactType, item: str, global_: bool
    ) -> InstallationRecord | None:
        """Return the record for a key, or None."""
        key = (provider, type, item, global_)
        for record in self.installations:
            if record.key == key:
                return record
        return None

    def find_by_path(self, path: str) -> InstallationRecord | None:
        for record in self.installations:
            if record.path == path:
                return record
        return None

    def upsert(self, record: InstallationRecord) -> "InstallationRegistry":
        """Insert or replace the record with the same key.

        A record of the same provider and type already pointing at the same
        path is replaced too, so renamed singleton items never leave two
        records for one file. Replacement keeps the record's position so the
        file diff stays small.
        """
        replaced = False
        installations: list[InstallationRecord] = []
        for existing in self.installations:
            same_file = (
                existing.provider == record.provider
                and existing.type == record.type
                and existing.global_ == record.global_
                and existing.path == record.path
            )
            if existing.key == record.key or same_file:
                if not replaced:
                    installations.append(record)
                    replaced = True
                continue
            installations.append(existing)
        if not replaced:
            installations.append(record)
        return self.model_copy(update={"installations": installations})

    def remove(
        self, provider: str, type: ArtifactType, item: str, global_: bool
    ) -> "InstallationRegistry":
        key = (provider, type, item, global_)
        installations = [r for r in self.installations if r.key != key]
        return self.model_copy(update={"installations": installations})

    def for_scope(self, global_: bool) -> list[InstallationRecord]:
        return [r for r in self.installations if r.global_ == global_]

    def with_applied_manifest_version(self, version: str | None) -> "InstallationRegistry":
        return self.model_copy(update={"applied_manifest_version": version})

    def with_last_reconciled(self, timestamp: str) -> "InstallationRegistry":
        return self.model_copy(update={"last_reconciled": timestamp})

    def to_dict(self) -> dict[str, Any]:
        """Serialize with on-disk (camelCase) keys, extras included."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
