"""Migration manifest models.

A kit ships a portable manifest declaring renames and provider-path moves.
Fields here are deliberately permissive; path safety and version gating are
applied when entries are selected for a run (see kitsync.io.manifest).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kitsync.models.artifact import ArtifactType


class RenameEntry(BaseModel):
    """A kit-relative source path that moved between releases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    since: str


class ProviderPathMigration(BaseModel):
    """A provider install location that moved between releases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: str
    type: ArtifactType
    from_: str = Field(alias="from")
    to: str
    since: str


class SectionRename(BaseModel):
    """A renamed section inside a merged config file.

    Parsed for completeness; merged-file section rewriting belongs to the
    content conversion layer and is not acted on by the planner.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    provider: str | None = None
    from_: str = Field(alias="from")
    to: str
    since: str


class MigrationManifest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    version: str
    cli_version: str = Field(alias="cliVersion")
    renames: list[RenameEntry] = Field(default_factory=list)
    provider_path_migrations: list[ProviderPathMigration] = Field(
        default_factory=list, alias="providerPathMigrations"
    )
    section_renames: list[SectionRename] = Field(default_factory=list, alias="sectionRenames")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
