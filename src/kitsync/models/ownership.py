"""Ownership classification results."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import assert_never


class Ownership(Enum):
    """Who owns a file on disk.

    TOOL_PRISTINE: byte-identical to what kitsync last wrote; safe to replace or delete.
    TOOL_MODIFIED: kitsync wrote it but the user changed it since; preserved unless forced.
    USER_OWNED: no provenance (untracked, missing, or no registry); always preserved.
    """

    USER_OWNED = "user"
    TOOL_PRISTINE = "tool"
    TOOL_MODIFIED = "tool-modified"


@dataclass(frozen=True)
class OwnershipResult:
    """Classification of a single path."""

    path: Path
    ownership: Ownership
    exists: bool
    expected_checksum: str | None = None
    actual_checksum: str | None = None

    def allows_removal(self, *, force: bool) -> bool:
        """Whether the file may be deleted or overwritten by kitsync."""
        match self.ownership:
            case Ownership.TOOL_PRISTINE:
                return True
            case Ownership.TOOL_MODIFIED:
                return force
            case Ownership.USER_OWNED:
                return False
            case _:
                assert_never(self.ownership)
