"""Collect artifacts from an extracted kit directory.

Layout understood:

    <kit>/agents/<name>.md
    <kit>/commands/<path>/<name>.md      (nested; item name keeps the path)
    <kit>/skills/<name>/SKILL.md
    <kit>/rules/<name>.md
    <kit>/hooks/<file>
    <kit>/CLAUDE.md                      (config)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from kitsync.models.artifact import ArtifactType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "CLAUDE.md"
SKILL_FILENAME = "SKILL.md"


@dataclass(frozen=True)
class KitItem:
    """One raw artifact as shipped by the kit, before provider rendering."""

    name: str
    type: ArtifactType
    source_path: str  # kit-relative, forward slashes
    raw: str
    body: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def description(self) -> str:
        value = self.metadata.get("description")
        return str(value) if value is not None else ""


def parse_kit_file(kit_dir: Path, path: Path, *, name: str, type: ArtifactType) -> KitItem:
    raw = path.read_text(encoding="utf-8")
    metadata: dict[str, Any] = {}
    body = raw
    if path.suffix == ".md":
        try:
            post = frontmatter.loads(raw)
        except yaml.YAMLError as e:
            logger.warning("Ignoring invalid front matter in %s: %s", path, e)
        else:
            metadata = dict(post.metadata)
            body = post.content
    return KitItem(
        name=name,
        type=type,
        source_path=path.relative_to(kit_dir).as_posix(),
        raw=raw,
        body=body,
        metadata=metadata,
    )


def _sorted_files(directory: Path, pattern: str) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob(pattern) if p.is_file())


def collect_kit_items(kit_dir: Path) -> list[KitItem]:
    """Collect every artifact in a kit directory, in a stable order.

    Raises:
        FileNotFoundError: If kit_dir does not exist
    """
    if not kit_dir.is_dir():
        raise FileNotFoundError(f"Kit directory not found: {kit_dir}")

    items: list[KitItem] = []

    for path in _sorted_files(kit_dir / "agents", "*.md"):
        items.append(parse_kit_file(kit_dir, path, name=path.stem, type="agent"))

    commands_dir = kit_dir / "commands"
    for path in _sorted_files(commands_dir, "**/*.md"):
        name = path.relative_to(commands_dir).with_suffix("").as_posix()
        items.append(parse_kit_file(kit_dir, path, name=name, type="command"))

    for path in _sorted_files(kit_dir / "skills", f"*/{SKILL_FILENAME}"):
        items.append(parse_kit_file(kit_dir, path, name=path.parent.name, type="skill"))

    for path in _sorted_files(kit_dir / "rules", "*.md"):
        items.append(parse_kit_file(kit_dir, path, name=path.stem, type="rules"))

    for path in _sorted_files(kit_dir / "hooks", "*"):
        items.append(parse_kit_file(kit_dir, path, name=path.name, type="hooks"))

    config_path = kit_dir / CONFIG_FILENAME
    if config_path.is_file():
        items.append(parse_kit_file(kit_dir, config_path, name="CLAUDE", type="config"))

    logger.debug("Collected %d kit items from %s", len(items), kit_dir)
    return items
