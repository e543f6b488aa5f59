"""Core module - Chunk identity, listings, diffs and the wire codec."""

from chunkvault.core.chunking import (
    Chunk,
    build_file_listing,
    build_listing,
    chunk_bytes,
    chunk_file,
    iter_chunk_pairs,
)
from chunkvault.core.config import (
    AVG_CHUNK_SIZE,
    MAX_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    ChunkingConfig,
)
from chunkvault.core.diff import ChunkListingDiff, diff_listings
from chunkvault.core.errors import (
    ChunkListingError,
    InvalidChunkLengthError,
    InvalidHashLengthError,
    ListingNotFoundError,
    ListingStoreError,
    MalformedListingError,
)
from chunkvault.core.hashing import (
    HASH_LENGTH_BYTES,
    ChunkHash,
    ChunkHasher,
    generate_hash_key,
)
from chunkvault.core.listing import ChunkEntry, ChunkListing
from chunkvault.core.wire import MAX_CHUNK_LENGTH

__all__ = [
    # Chunking
    "Chunk",
    "build_file_listing",
    "build_listing",
    "chunk_bytes",
    "chunk_file",
    "iter_chunk_pairs",
    # Config
    "AVG_CHUNK_SIZE",
    "MAX_CHUNK_SIZE",
    "MIN_CHUNK_SIZE",
    "ChunkingConfig",
    # Diff
    "ChunkListingDiff",
    "diff_listings",
    # Errors
    "ChunkListingError",
    "InvalidChunkLengthError",
    "InvalidHashLengthError",
    "ListingNotFoundError",
    "ListingStoreError",
    "MalformedListingError",
    # Hashing
    "HASH_LENGTH_BYTES",
    "ChunkHash",
    "ChunkHasher",
    "generate_hash_key",
    # Listing
    "ChunkEntry",
    "ChunkListing",
    # Wire
    "MAX_CHUNK_LENGTH",
]
