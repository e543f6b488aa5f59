"""Shared pytest fixtures for chunkvault tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chunkvault.core.config import ChunkingConfig
from chunkvault.core.hashing import HASH_LENGTH_BYTES, ChunkHash


def name_hash(name: str) -> ChunkHash:
    """Make a readable test hash: the name's bytes, zero-padded to full length."""
    return ChunkHash(name.encode("utf-8").ljust(HASH_LENGTH_BYTES, b"\0"))


@pytest.fixture
def make_hash() -> Callable[[str], ChunkHash]:
    """Factory for readable test hashes."""
    return name_hash


@pytest.fixture
def small_chunks() -> ChunkingConfig:
    """Chunk sizes small enough to get many chunks from little data."""
    return ChunkingConfig(min_size=256, avg_size=1024, max_size=4096)
