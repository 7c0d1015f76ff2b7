"""I/O operations for kitsync."""

from kitsync.io.checksum import hash_bytes, hash_file, hash_stream, hash_text
from kitsync.io.manifest import load_migration_manifest
from kitsync.io.registry import load_registry, save_registry

__all__ = [
    "hash_bytes",
    "hash_file",
    "hash_stream",
    "hash_text",
    "load_migration_manifest",
    "load_registry",
    "save_registry",
]
