"""Filesystem snapshot taken before planning.

The planner never touches disk; it reads target state from the map built
here. Taking the snapshot in one pass before planning keeps the plan
consistent with a single view of the filesystem.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from kitsync.io.checksum import hash_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetProbe:
    """State of one target path.

    `checksum` is None when the path exists but its content cannot be
    trusted as ours: a symlink, a directory, or an unreadable file.
    """

    exists: bool
    checksum: str | None = None
    is_symlink: bool = False


MISSING = TargetProbe(exists=False)


def probe_path(path: Path) -> TargetProbe:
    if path.is_symlink():
        return TargetProbe(exists=True, is_symlink=True)
    if not path.exists():
        return MISSING
    if not path.is_file():
        return TargetProbe(exists=True)
    try:
        return TargetProbe(exists=True, checksum=hash_file(path))
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return TargetProbe(exists=True)


def probe_targets(paths: Iterable[Path], *, max_workers: int) -> dict[str, TargetProbe]:
    """Probe many paths concurrently.

    Returns:
        Mapping of str(path) to its probe
    """
    unique = list(dict.fromkeys(paths))
    if not unique:
        return {}

    probes: dict[str, TargetProbe] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(unique)))) as executor:
        future_to_path = {executor.submit(probe_path, path): path for path in unique}
        for future in as_completed(future_to_path):
            path = future_to_path[future]
            probes[str(path)] = future.result()
    logger.debug("Probed %d target paths", len(probes))
    return probes
