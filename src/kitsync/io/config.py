"""User configuration loading.

Project scope reads kitsync.toml from the project root; global scope reads
~/.kitsync/config.toml. A missing file means defaults.
"""

import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from kitsync.models.config import KitsyncConfig
from kitsync.models.plan import validate_conflict_resolution
from kitsync.providers.registry import validate_provider_names

PROJECT_CONFIG_FILENAME = "kitsync.toml"
GLOBAL_CONFIG_PATH = Path(".kitsync") / "config.toml"

_KNOWN_KEYS = frozenset({"providers", "on_modified", "on_untracked", "max_workers"})


def config_path(*, project_root: Path, home_dir: Path, global_: bool) -> Path:
    if global_:
        return home_dir / GLOBAL_CONFIG_PATH
    return project_root / PROJECT_CONFIG_FILENAME


def load_config(path: Path) -> KitsyncConfig:
    """Load configuration from a TOML file.

    Returns:
        KitsyncConfig with defaults for absent keys, or all defaults if the
        file does not exist

    Raises:
        ValueError: If the file is malformed or holds an invalid value
    """
    if not path.exists():
        return KitsyncConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e
    return parse_config(data, source=path)


def parse_config(data: dict[str, Any], *, source: Path) -> KitsyncConfig:
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown key '{unknown[0]}' in {source}")

    providers = data.get("providers")
    if providers is not None:
        if not isinstance(providers, list) or not all(isinstance(p, str) for p in providers):
            raise ValueError(f"'providers' in {source} must be a list of provider names")
        providers = validate_provider_names(providers)

    max_workers = data.get("max_workers", 0)
    if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 0:
        raise ValueError(f"'max_workers' in {source} must be a non-negative integer")

    return KitsyncConfig(
        providers=providers,
        on_modified=validate_conflict_resolution(str(data.get("on_modified", "keep"))),
        on_untracked=validate_conflict_resolution(str(data.get("on_untracked", "keep"))),
        max_workers=max_workers,
    )


def save_config(path: Path, config: KitsyncConfig) -> None:
    """Write configuration as TOML, creating parent directories."""
    data: dict[str, Any] = {}
    if config.providers is not None:
        data["providers"] = list(config.providers)
    data["on_modified"] = config.on_modified
    data["on_untracked"] = config.on_untracked
    if config.max_workers > 0:
        data["max_workers"] = config.max_workers

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)
