"""Pure resolution of provider targets against real scope roots."""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from kitsync.errors import UnsupportedTargetError
from kitsync.models.artifact import ArtifactType, SourceItem
from kitsync.models.provider import ProviderConfig, ProviderTarget


@dataclass(frozen=True)
class TargetLocator:
    """Maps (provider, artifact type, scope) to absolute paths.

    Performs no I/O, so the planner can use it while staying pure.
    """

    providers: Mapping[str, ProviderConfig]
    project_root: Path
    home_dir: Path

    def scope_root(self, global_: bool) -> Path:
        return self.home_dir if global_ else self.project_root

    def target(self, provider: str, artifact_type: ArtifactType, global_: bool) -> ProviderTarget:
        """Return the renderable target for a provider/type/scope.

        Raises:
            UnsupportedTargetError: If the provider has no renderable location
        """
        config = self.providers.get(provider)
        target = config.target(artifact_type) if config is not None else None
        if target is None or not target.renderable or target.path_for(global_=global_) is None:
            raise UnsupportedTargetError(provider, artifact_type, global_scope=global_)
        return target

    def supports(self, provider: str, artifact_type: ArtifactType, global_: bool) -> bool:
        try:
            self.target(provider, artifact_type, global_)
        except UnsupportedTargetError:
            return False
        return True

    def base_path(self, provider: str, artifact_type: ArtifactType, global_: bool) -> Path:
        """Directory (per-file) or file (merged/single) a target resolves to."""
        target = self.target(provider, artifact_type, global_)
        relative = target.path_for(global_=global_)
        assert relative is not None
        return self.scope_root(global_) / relative

    def resolve(self, provider: str, item: SourceItem, global_: bool) -> Path:
        """Absolute path an item is written to.

        Raises:
            UnsupportedTargetError: If the provider has no renderable location
        """
        target = self.target(provider, item.type, global_)
        base = self.base_path(provider, item.type, global_)
        if target.write_strategy == "per-file":
            return base / item.filename
        return base
