"""Tests for SHA-256 content hashing."""

import io
from pathlib import Path

from kitsync.io.checksum import hash_bytes, hash_file, hash_stream, hash_text

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_hash_bytes_known_digest() -> None:
    assert hash_bytes(b"") == EMPTY_SHA256


def test_hash_is_stable_across_calls() -> None:
    assert hash_text("hello") == hash_text("hello")
    assert hash_text("hello") != hash_text("hello!")


def test_hash_file_matches_hash_text(tmp_path: Path) -> None:
    path = tmp_path / "agent.md"
    path.write_bytes("# Agent\n\nnon-ascii: é\n".encode())

    assert hash_file(path) == hash_text("# Agent\n\nnon-ascii: é\n")


def test_hash_stream_reads_in_chunks() -> None:
    data = b"x" * 10_000

    assert hash_stream(io.BytesIO(data), chunk_size=7) == hash_bytes(data)


def test_digest_is_lowercase_hex() -> None:
    digest = hash_text("content")

    assert len(digest) == 64
    assert digest == digest.lower()
    int(digest, 16)
