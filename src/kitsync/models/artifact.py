"""Artifact types and desired source items."""

from dataclasses import dataclass
from functools import cached_property
from typing import Literal, cast

from kitsync.io.checksum import hash_text

ArtifactType = Literal["agent", "command", "skill", "config", "rules", "hooks"]

# Order used when presenting grouped output
ARTIFACT_TYPES: tuple[ArtifactType, ...] = ("agent", "command", "skill", "config", "rules", "hooks")

ARTIFACT_TYPE_LABELS: dict[ArtifactType, str] = {
    "agent": "Subagents",
    "command": "Commands",
    "skill": "Skills",
    "config": "Config",
    "rules": "Rules",
    "hooks": "Hooks",
}

InstallSource = Literal["kit", "user"]


def validate_artifact_type(value: str) -> ArtifactType:
    """Validate and return an artifact type.

    Raises:
        ValueError: If value is not a known artifact type
    """
    if value not in ARTIFACT_TYPES:
        raise ValueError(f"Invalid artifact type: {value}")
    return cast(ArtifactType, value)


@dataclass(frozen=True)
class SourceItem:
    """One artifact available to install, already rendered for a provider.

    Recomputed every run from the extracted kit tree. `filename` is the
    provider-specific target filename produced by the renderer (may contain
    "/" for nested layouts such as skills/<name>/SKILL.md).
    """

    name: str
    type: ArtifactType
    rendered_content: str
    source_path: str  # kit-relative, forward slashes
    filename: str

    @cached_property
    def content_checksum(self) -> str:
        return hash_text(self.rendered_content)
