from kitsync.integrations.filesystem.abc import Filesystem
from kitsync.integrations.filesystem.dry_run import DryRunFilesystem
from kitsync.integrations.filesystem.real import RealFilesystem

__all__ = [
    "DryRunFilesystem",
    "Filesystem",
    "RealFilesystem",
]
