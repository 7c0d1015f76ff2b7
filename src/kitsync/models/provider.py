"""Provider install-target models."""

from dataclasses import dataclass, field
from typing import Literal

from kitsync.models.artifact import ArtifactType

WriteStrategy = Literal["per-file", "merge-single", "single-file", "yaml-merge", "json-merge"]

# Strategies whose output the renderer can produce
RENDERABLE_STRATEGIES: frozenset[WriteStrategy] = frozenset(
    {"per-file", "merge-single", "single-file"}
)

ConversionFormat = Literal[
    "direct-copy",
    "fm-to-fm",
    "fm-strip",
    "md-to-toml",
    "fm-to-yaml",
    "fm-to-json",
]


@dataclass(frozen=True)
class ProviderTarget:
    """Where and how one artifact type lands for one provider.

    `project_path` is relative to the project root; `global_path` is relative
    to the user's home directory. None means the scope is unsupported. For
    per-file targets the path is a directory; otherwise it names the file.
    """

    project_path: str | None
    global_path: str | None
    write_strategy: WriteStrategy
    file_extension: str
    format: ConversionFormat = "direct-copy"

    def path_for(self, *, global_: bool) -> str | None:
        return self.global_path if global_ else self.project_path

    @property
    def renderable(self) -> bool:
        return self.write_strategy in RENDERABLE_STRATEGIES


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    display_name: str
    # Home-relative directory whose presence means the tool is installed
    detect_path: str
    targets: dict[ArtifactType, ProviderTarget] = field(default_factory=dict)

    def target(self, artifact_type: ArtifactType) -> ProviderTarget | None:
        return self.targets.get(artifact_type)
