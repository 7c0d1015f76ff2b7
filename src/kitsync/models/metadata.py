"""Legacy TrackedFile ledger (metadata.json) models.

Two on-disk shapes exist. Older installs wrote a flat single-kit document
(`name`, `version`, `files`); newer installs key per-kit metadata under
`kits`. Both are parsed into a tagged union and callers move to the
multi-kit shape through upgrade_metadata(), which never goes backwards.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator

TrackedOwnership = Literal["tool", "user", "tool-modified"]

# Spellings written by earlier releases
_LEGACY_OWNERSHIP_NAMES = {"ck": "tool", "ck-modified": "tool-modified"}

DEFAULT_KIT_NAME = "default"


class TrackedFile(BaseModel):
    """A file recorded in the legacy ledger.

    `path` is relative to the install root and always uses forward slashes.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    path: str
    checksum: str
    ownership: TrackedOwnership = "tool"
    installed_version: str = Field(default="unknown", alias="installedVersion")

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        return v.replace("\\", "/")

    @field_validator("ownership", mode="before")
    @classmethod
    def upgrade_ownership_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _LEGACY_OWNERSHIP_NAMES.get(v, v)
        return v


class KitMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    version: str
    installed_at: str = Field(alias="installedAt")
    files: list[TrackedFile] = Field(default_factory=list)


class LegacyMetadata(BaseModel):
    """Flat single-kit ledger."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    format: Literal["legacy"] = Field(default="legacy", exclude=True)
    name: str | None = None
    version: str | None = None
    installed_at: str | None = Field(default=None, alias="installedAt")
    scope: str | None = None
    installed_files: list[str] | None = Field(default=None, alias="installedFiles")
    user_config_files: list[str] | None = Field(default=None, alias="userConfigFiles")
    files: list[TrackedFile] = Field(default_factory=list)

    @property
    def kit_name(self) -> str:
        return self.name or DEFAULT_KIT_NAME

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.version is None and not self.files

    def all_files(self) -> list[TrackedFile]:
        return list(self.files)


class MultiKitMetadata(BaseModel):
    """Per-kit ledger.

    The flat fields are carried over from an upgraded legacy document so
    readers that only understand the old shape keep working.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    format: Literal["multi-kit"] = Field(default="multi-kit", exclude=True)
    kits: dict[str, KitMetadata]
    scope: str | None = None
    name: str | None = None
    version: str | None = None
    installed_at: str | None = Field(default=None, alias="installedAt")
    installed_files: list[str] | None = Field(default=None, alias="installedFiles")
    user_config_files: list[str] | None = Field(default=None, alias="userConfigFiles")
    files: list[TrackedFile] | None = None

    def all_files(self) -> list[TrackedFile]:
        result: list[TrackedFile] = []
        for kit in self.kits.values():
            result.extend(kit.files)
        return result

    def files_for_kit(self, kit_name: str) -> list[TrackedFile]:
        kit = self.kits.get(kit_name)
        if kit is None:
            return []
        return list(kit.files)

    def with_kit_files(self, kit_name: str, files: list[TrackedFile]) -> "MultiKitMetadata":
        kit = self.kits[kit_name]
        kits = {**self.kits, kit_name: kit.model_copy(update={"files": files})}
        return self.model_copy(update={"kits": kits})

    def without_kit(self, kit_name: str) -> "MultiKitMetadata":
        kits = {name: kit for name, kit in self.kits.items() if name != kit_name}
        return self.model_copy(update={"kits": kits})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _metadata_format(value: Any) -> str:
    if isinstance(value, dict):
        kits = value.get("kits")
        return "multi-kit" if isinstance(kits, dict) and kits else "legacy"
    return getattr(value, "format", "legacy")


Metadata = Annotated[
    Annotated[LegacyMetadata, Tag("legacy")] | Annotated[MultiKitMetadata, Tag("multi-kit")],
    Discriminator(_metadata_format),
]

_METADATA_ADAPTER: TypeAdapter[LegacyMetadata | MultiKitMetadata] = TypeAdapter(Metadata)


def parse_metadata(data: Any) -> LegacyMetadata | MultiKitMetadata:
    """Parse a metadata.json document into its tagged shape.

    Raises:
        pydantic.ValidationError: If the document matches neither shape
    """
    return _METADATA_ADAPTER.validate_python(data)


def upgrade_metadata(
    metadata: LegacyMetadata | MultiKitMetadata, *, now: str
) -> MultiKitMetadata:
    """Return the multi-kit form of a ledger.

    Idempotent: a multi-kit document is returned unchanged. A legacy document
    becomes a single kit named after its `name` field, with every legacy
    field kept alongside.
    """
    match metadata:
        case MultiKitMetadata():
            return metadata
        case LegacyMetadata():
            kit = KitMetadata(
                version=metadata.version or "unknown",
                installed_at=metadata.installed_at or now,
                files=list(metadata.files),
            )
            extras = {k: v for k, v in (metadata.__pydantic_extra__ or {}).items() if k != "kits"}
            return MultiKitMetadata(
                kits={metadata.kit_name: kit},
                scope=metadata.scope,
                name=metadata.name,
                version=metadata.version,
                installed_at=metadata.installed_at,
                installed_files=metadata.installed_files,
                user_config_files=metadata.user_config_files,
                files=list(metadata.files) if metadata.files else None,
                **extras,
            )
