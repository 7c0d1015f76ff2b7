"""Checksum-based ownership classification.

Every deletion or overwrite decision downstream is made from the three-way
result computed here:

- missing file: USER_OWNED with exists=False (nothing to protect)
- no provenance for the path: USER_OWNED
- provenance with matching checksum: TOOL_PRISTINE
- provenance with a different (or unknowable) checksum: TOOL_MODIFIED

Symlinks are never hashed through; kitsync only ever writes regular files,
so a symlink at a managed path is treated as user-owned.
"""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from kitsync.io.checksum import hash_file
from kitsync.models.metadata import LegacyMetadata, MultiKitMetadata, TrackedFile
from kitsync.models.ownership import Ownership, OwnershipResult
from kitsync.models.registry import UNKNOWN_CHECKSUM, InstallationRecord


def classify_file(path: Path, expected_checksum: str | None) -> OwnershipResult:
    """Classify a path against the checksum kitsync recorded for it.

    Args:
        path: File to classify
        expected_checksum: Checksum recorded when kitsync last wrote the
            file, or None if the path has no provenance
    """
    if path.is_symlink():
        return OwnershipResult(path=path, ownership=Ownership.USER_OWNED, exists=True)
    if not path.is_file():
        return OwnershipResult(path=path, ownership=Ownership.USER_OWNED, exists=False)
    if expected_checksum is None:
        return OwnershipResult(path=path, ownership=Ownership.USER_OWNED, exists=True)

    actual = hash_file(path)
    ownership = (
        Ownership.TOOL_PRISTINE
        if expected_checksum != UNKNOWN_CHECKSUM and actual == expected_checksum
        else Ownership.TOOL_MODIFIED
    )
    return OwnershipResult(
        path=path,
        ownership=ownership,
        exists=True,
        expected_checksum=expected_checksum,
        actual_checksum=actual,
    )


def classify_record(
    record: InstallationRecord | None, path: Path | None = None
) -> OwnershipResult:
    """Classify the file behind a registry record.

    With no record, `path` must be given and the result is user-owned (or
    missing).
    """
    if record is None:
        if path is None:
            raise ValueError("classify_record needs a path when record is None")
        return classify_file(path, None)
    return classify_file(path or Path(record.path), record.target_checksum)


def find_tracked_file(
    metadata: LegacyMetadata | MultiKitMetadata | None, relative_path: str
) -> TrackedFile | None:
    if metadata is None:
        return None
    for tracked in metadata.all_files():
        if tracked.path == relative_path:
            return tracked
    return None


def classify_tracked_file(
    path: Path,
    install_root: Path,
    metadata: LegacyMetadata | MultiKitMetadata | None,
) -> OwnershipResult:
    """Classify a file under a legacy install root using its metadata.json ledger.

    Ledger paths are relative to the install root with forward slashes.
    """
    relative = path.relative_to(install_root).as_posix()
    tracked = find_tracked_file(metadata, relative)
    if tracked is None or tracked.ownership == "user":
        return classify_file(path, None)
    return classify_file(path, tracked.checksum)


def classify_batch(
    paths: Iterable[Path],
    classify: Callable[[Path], OwnershipResult],
    *,
    max_workers: int,
) -> dict[Path, OwnershipResult]:
    """Classify many paths concurrently.

    Each classification only reads its own file, so completion order does
    not matter.

    Args:
        paths: Paths to classify
        classify: Single-path classifier, e.g. a partial of classify_tracked_file
        max_workers: Upper bound on worker threads

    Returns:
        Mapping of path to its classification
    """
    unique = list(dict.fromkeys(paths))
    if not unique:
        return {}

    results: dict[Path, OwnershipResult] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(unique)))) as executor:
        future_to_path = {executor.submit(classify, path): path for path in unique}
        for future in as_completed(future_to_path):
            path = future_to_path[future]
            results[path] = future.result()
    return results
