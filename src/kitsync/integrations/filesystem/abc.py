"""Filesystem mutation abstraction.

Every write, copy, and delete kitsync performs on managed paths goes through
this ABC. Reads (hashing, existence checks) use pathlib directly.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Filesystem(ABC):
    """Abstract filesystem mutations for dependency injection."""

    @abstractmethod
    def write_text(self, path: Path, content: str) -> None:
        """Write UTF-8 text, creating parent directories as needed."""
        ...

    @abstractmethod
    def remove_file(self, path: Path) -> None:
        """Remove a file or symlink.

        Raises:
            FileNotFoundError: If nothing exists at path
        """
        ...

    @abstractmethod
    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy a file, creating the destination's parent directories."""
        ...

    @abstractmethod
    def copy_tree(self, source: Path, destination: Path) -> None:
        """Copy a directory tree without following symlinks.

        Raises:
            FileExistsError: If destination already exists
        """
        ...

    @abstractmethod
    def remove_tree(self, path: Path) -> None:
        """Remove a directory tree."""
        ...

    @abstractmethod
    def remove_empty_dir(self, path: Path) -> None:
        """Remove a directory that has no entries.

        Raises:
            OSError: If the directory is not empty
        """
        ...
