"""Production filesystem implementation."""

import shutil
from pathlib import Path

from kitsync.integrations.filesystem.abc import Filesystem


class RealFilesystem(Filesystem):
    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the bytes on disk equal to the hashed content
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)

    def remove_file(self, path: Path) -> None:
        path.unlink()

    def copy_file(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    def copy_tree(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, destination, symlinks=True)

    def remove_tree(self, path: Path) -> None:
        shutil.rmtree(path)

    def remove_empty_dir(self, path: Path) -> None:
        path.rmdir()
