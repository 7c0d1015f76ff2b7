"""Render kit items into provider-specific SourceItems.

Only the formats needed by renderable targets are produced here. Targets
that merge into YAML or JSON mode files are not renderable and yield no
items.
"""

import logging
from collections import defaultdict
from pathlib import PurePosixPath
from typing import assert_never

import tomli_w

from kitsync.models.artifact import ARTIFACT_TYPES, ArtifactType, SourceItem
from kitsync.models.provider import ProviderConfig, ProviderTarget
from kitsync.sources.kit_tree import SKILL_FILENAME, KitItem

logger = logging.getLogger(__name__)

MERGED_SOURCE_DIRS: dict[ArtifactType, str] = {
    "agent": "agents",
    "command": "commands",
    "skill": "skills",
    "config": "config",
    "rules": "rules",
    "hooks": "hooks",
}


def render_content(item: KitItem, target: ProviderTarget) -> str:
    match target.format:
        case "direct-copy" | "fm-to-fm":
            return item.raw
        case "fm-strip":
            return item.body.lstrip("\n")
        case "md-to-toml":
            data = {"description": item.description, "prompt": item.body.strip() + "\n"}
            if not item.description:
                del data["description"]
            return tomli_w.dumps(data, multiline_strings=True)
        case "fm-to-yaml" | "fm-to-json":
            raise ValueError(f"{target.format} output is not supported")
        case _:
            assert_never(target.format)


def target_filename(item: KitItem, target: ProviderTarget) -> str:
    if item.type == "skill":
        return f"{item.name}/{SKILL_FILENAME}"
    return f"{item.name}{target.file_extension}"


def _merge(
    items: list[KitItem], target: ProviderTarget, artifact_type: ArtifactType
) -> SourceItem:
    sections = [f"## {item.name}\n\n{render_content(item, target).strip()}\n" for item in items]
    source_dir = MERGED_SOURCE_DIRS[artifact_type]
    template = target.project_path or target.global_path or source_dir
    return SourceItem(
        name=source_dir,
        type=artifact_type,
        rendered_content="\n".join(sections),
        source_path=source_dir,
        filename=PurePosixPath(template).name,
    )


def render_for_provider(items: list[KitItem], provider: ProviderConfig) -> list[SourceItem]:
    """Render every kit item the provider has a renderable target for.

    merge-single targets collapse all items of a type into one SourceItem,
    so each target path receives at most one item.
    """
    by_type: dict[ArtifactType, list[KitItem]] = defaultdict(list)
    for item in items:
        by_type[item.type].append(item)

    rendered: list[SourceItem] = []
    for artifact_type in ARTIFACT_TYPES:
        type_items = by_type.get(artifact_type)
        if not type_items:
            continue
        target = provider.target(artifact_type)
        if target is None:
            continue
        if not target.renderable:
            logger.debug(
                "%s %ss use %s, which kitsync cannot render; skipping",
                provider.name,
                artifact_type,
                target.write_strategy,
            )
            continue

        match target.write_strategy:
            case "merge-single":
                rendered.append(_merge(type_items, target, artifact_type))
            case "single-file":
                # One file per scope; the last item wins if a kit ships several
                item = type_items[-1]
                rendered.append(
                    SourceItem(
                        name=item.name,
                        type=artifact_type,
                        rendered_content=render_content(item, target),
                        source_path=item.source_path,
                        filename=PurePosixPath(item.source_path).name,
                    )
                )
            case _:
                for item in type_items:
                    rendered.append(
                        SourceItem(
                            name=item.name,
                            type=artifact_type,
                            rendered_content=render_content(item, target),
                            source_path=item.source_path,
                            filename=target_filename(item, target),
                        )
                    )
    return rendered
