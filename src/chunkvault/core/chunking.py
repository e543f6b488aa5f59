"""Content-Defined Chunking (CDC) for chunkvault.

This module feeds the chunk listing core using the FastCDC algorithm:
- Stable chunk boundaries (insertions don't affect distant chunks)
- Chunk identity through ChunkHasher
- Direct construction of a ChunkListing from a payload
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from fastcdc import fastcdc

from chunkvault.core.config import ChunkingConfig
from chunkvault.core.hashing import ChunkHash, ChunkHasher
from chunkvault.core.listing import ChunkListing

logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    """Represents a chunk of data with metadata."""

    index: int
    offset: int
    data: bytes
    hash: ChunkHash

    @property
    def size(self) -> int:
        """Return the size of this chunk in bytes."""
        return len(self.data)


def chunk_bytes(
    data: bytes,
    hasher: ChunkHasher | None = None,
    config: ChunkingConfig | None = None,
) -> Iterator[Chunk]:
    """Split data into content-defined chunks.

    Args:
        data: Raw bytes to chunk.
        hasher: Hasher for chunk identity (unkeyed SHA-256 by default).
        config: Chunk size parameters (defaults to 1/4/8 MB).

    Yields:
        Chunk objects with index, offset, data, and hash.
    """
    if not data:
        return

    hasher = hasher or ChunkHasher()
    config = config or ChunkingConfig()

    # FastCDC expects data and returns chunk boundaries
    chunks = fastcdc(
        data,
        min_size=config.min_size,
        avg_size=config.avg_size,
        max_size=config.max_size,
    )

    for index, cdc_chunk in enumerate(chunks):
        chunk_data = data[cdc_chunk.offset : cdc_chunk.offset + cdc_chunk.length]
        yield Chunk(
            index=index,
            offset=cdc_chunk.offset,
            data=chunk_data,
            hash=hasher.hash(chunk_data),
        )


def chunk_file(
    path: Path,
    hasher: ChunkHasher | None = None,
    config: ChunkingConfig | None = None,
) -> Iterator[Chunk]:
    """Split a file into content-defined chunks.

    Reads the entire file into memory.

    Args:
        path: Path to the file to chunk.
        hasher: Hasher for chunk identity.
        config: Chunk size parameters.

    Yields:
        Chunk objects with index, offset, data, and hash.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    data = path.read_bytes()
    logger.debug("Chunking %s (%d bytes)", path, len(data))
    yield from chunk_bytes(data, hasher, config)


def iter_chunk_pairs(chunks: Iterator[Chunk]) -> Iterator[tuple[ChunkHash, int]]:
    """Reduce chunks to the (hash, length) pairs a listing is built from."""
    for chunk in chunks:
        yield chunk.hash, chunk.size


def build_listing(
    data: bytes,
    hasher: ChunkHasher | None = None,
    config: ChunkingConfig | None = None,
) -> ChunkListing:
    """Chunk a payload and build its listing.

    Args:
        data: Payload bytes.
        hasher: Hasher for chunk identity.
        config: Chunk size parameters.

    Returns:
        ChunkListing of the payload (empty for empty data).
    """
    listing = ChunkListing.build(iter_chunk_pairs(chunk_bytes(data, hasher, config)))
    logger.debug("Built listing: %d chunks, %d bytes", len(listing), listing.total_length)
    return listing


def build_file_listing(
    path: Path,
    hasher: ChunkHasher | None = None,
    config: ChunkingConfig | None = None,
) -> ChunkListing:
    """Chunk a file and build its listing.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    return ChunkListing.build(iter_chunk_pairs(chunk_file(path, hasher, config)))
