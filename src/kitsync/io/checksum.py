"""SHA-256 content hashing.

Every ownership and change decision compares digests produced here, so all
helpers return the same 64-character lowercase hex form for the same bytes.
Files and streams are hashed in fixed-size chunks to keep memory bounded.
"""

import hashlib
from pathlib import Path
from typing import BinaryIO

CHUNK_SIZE = 1024 * 1024


def hash_bytes(data: bytes) -> str:
    """Return the SHA-256 hex digest of a byte string."""
    return hashlib.sha256(data).hexdigest()


def hash_text(text: str) -> str:
    """Return the SHA-256 hex digest of text encoded as UTF-8.

    Rendered content is written to disk as UTF-8, so this digest equals
    hash_file() of the written file.
    """
    return hash_bytes(text.encode("utf-8"))


def hash_stream(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> str:
    """Return the SHA-256 hex digest of everything remaining in a binary stream."""
    digest = hashlib.sha256()
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        digest.update(chunk)
    return digest.hexdigest()


def hash_file(path: Path, chunk_size: int = CHUNK_SIZE) -> str:
    """Return the SHA-256 hex digest of a file's bytes.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be read
    """
    with path.open("rb") as f:
        return hash_stream(f, chunk_size)
