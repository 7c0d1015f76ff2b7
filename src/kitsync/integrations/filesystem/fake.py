"""Filesystem wrapper that injects failures, for testing."""

from collections.abc import Mapping
from pathlib import Path

from kitsync.integrations.filesystem.abc import Filesystem
from kitsync.integrations.filesystem.real import RealFilesystem


class FlakyFilesystem(Filesystem):
    """Delegates to a real filesystem, raising queued errors first.

    `failures` maps a path to the errors raised by successive mutations of
    that path, or an (operation, path) pair to errors raised by that
    operation only; once a queue is empty the call goes through. This
    class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(
        self,
        failures: Mapping[Path | tuple[str, Path], list[OSError]] | None = None,
        inner: Filesystem | None = None,
    ) -> None:
        self._failures = {key: list(errors) for key, errors in (failures or {}).items()}
        self._inner = inner if inner is not None else RealFilesystem()
        self._calls: list[tuple[str, Path]] = []

    @property
    def calls(self) -> list[tuple[str, Path]]:
        """(operation, path) for every mutation attempted, for test assertions only."""
        return self._calls

    def _attempt(self, operation: str, path: Path) -> None:
        self._calls.append((operation, path))
        queue = self._failures.get((operation, path)) or self._failures.get(path)
        if queue:
            raise queue.pop(0)

    def write_text(self, path: Path, content: str) -> None:
        self._attempt("write_text", path)
        self._inner.write_text(path, content)

    def remove_file(self, path: Path) -> None:
        self._attempt("remove_file", path)
        self._inner.remove_file(path)

    def copy_file(self, source: Path, destination: Path) -> None:
        self._attempt("copy_file", source)
        self._inner.copy_file(source, destination)

    def copy_tree(self, source: Path, destination: Path) -> None:
        self._attempt("copy_tree", source)
        self._inner.copy_tree(source, destination)

    def remove_tree(self, path: Path) -> None:
        self._attempt("remove_tree", path)
        self._inner.remove_tree(path)

    def remove_empty_dir(self, path: Path) -> None:
        self._attempt("remove_empty_dir", path)
        self._inner.remove_empty_dir(path)
