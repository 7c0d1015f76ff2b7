"""Application context with dependency injection.

The KitsyncContext dataclass holds every side-effecting dependency
(filesystem, clock) plus the two scope roots. It is created once at the CLI
entry point and threaded through commands via click's context object.
"""

from dataclasses import dataclass, replace
from pathlib import Path

from kitsync.integrations.filesystem import DryRunFilesystem, Filesystem, RealFilesystem
from kitsync.integrations.time import RealTime, Time
from kitsync.io.config import config_path, load_config
from kitsync.models.config import KitsyncConfig


@dataclass(frozen=True)
class KitsyncContext:
    """Immutable context holding all dependencies for kitsync operations.

    Attributes:
        fs: Filesystem used for every mutation of managed paths
        time: Clock for timestamps and retry backoff
        project_root: Root of the project scope
        home_dir: Root of the global scope
        debug: Debug flag for error handling (full stack traces)
        dry_run: True when fs is a no-op filesystem
    """

    fs: Filesystem
    time: Time
    project_root: Path
    home_dir: Path
    debug: bool
    dry_run: bool = False

    def scope_root(self, global_: bool) -> Path:
        return self.home_dir if global_ else self.project_root

    def load_config(self, *, global_: bool) -> KitsyncConfig:
        """Load the configuration file of a scope.

        Raises:
            ValueError: If the file is malformed or holds an invalid value
        """
        return load_config(
            config_path(project_root=self.project_root, home_dir=self.home_dir, global_=global_)
        )

    def with_dry_run(self) -> "KitsyncContext":
        return replace(self, fs=DryRunFilesystem(), dry_run=True)

    @staticmethod
    def for_test(
        fs: Filesystem | None = None,
        time: Time | None = None,
        project_root: Path | None = None,
        home_dir: Path | None = None,
        debug: bool = False,
    ) -> "KitsyncContext":
        """Create test context with sensible defaults for unspecified values.

        Uses FakeTime by default so retries never sleep and timestamps are
        fixed.

        Example:
            >>> ctx = KitsyncContext.for_test(project_root=tmp_path / "proj", home_dir=tmp_path)
        """
        from kitsync.integrations.time.fake import FakeTime

        resolved_fs: Filesystem = fs if fs is not None else RealFilesystem()
        resolved_time: Time = time if time is not None else FakeTime()
        resolved_project_root = project_root if project_root is not None else Path("/fake/project")
        resolved_home_dir = home_dir if home_dir is not None else Path("/fake/home")

        return KitsyncContext(
            fs=resolved_fs,
            time=resolved_time,
            project_root=resolved_project_root,
            home_dir=resolved_home_dir,
            debug=debug,
        )


def create_context(*, debug: bool) -> KitsyncContext:
    """Create production context with real implementations.

    Called once at CLI entry point. The project scope is the current
    working directory; the global scope is the user's home directory.
    """
    return KitsyncContext(
        fs=RealFilesystem(),
        time=RealTime(),
        project_root=Path.cwd(),
        home_dir=Path.home(),
        debug=debug,
    )
