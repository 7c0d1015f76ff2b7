"""No-op filesystem for dry runs."""

import logging
from pathlib import Path

from kitsync.integrations.filesystem.abc import Filesystem

logger = logging.getLogger(__name__)


class DryRunFilesystem(Filesystem):
    """No-op implementation that prevents execution of destructive operations.

    Every mutation is logged at debug level and skipped, so operations that
    decide per file (uninstall, skill cleanup) report exactly what they would
    do without touching disk.

    Usage:
        fs = DryRunFilesystem()
        fs.remove_file(path)  # logged, not removed
    """

    def write_text(self, path: Path, content: str) -> None:
        logger.debug("[dry-run] would write %s (%d chars)", path, len(content))

    def remove_file(self, path: Path) -> None:
        logger.debug("[dry-run] would remove %s", path)

    def copy_file(self, source: Path, destination: Path) -> None:
        logger.debug("[dry-run] would copy %s -> %s", source, destination)

    def copy_tree(self, source: Path, destination: Path) -> None:
        logger.debug("[dry-run] would copy tree %s -> %s", source, destination)

    def remove_tree(self, path: Path) -> None:
        logger.debug("[dry-run] would remove tree %s", path)

    def remove_empty_dir(self, path: Path) -> None:
        logger.debug("[dry-run] would remove empty directory %s", path)
