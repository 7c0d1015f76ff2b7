"""Kit sources: collecting artifacts from a kit tree and rendering them per provider."""

from kitsync.sources.kit_tree import KitItem, collect_kit_items
from kitsync.sources.renderer import render_for_provider

__all__ = [
    "KitItem",
    "collect_kit_items",
    "render_for_provider",
]
