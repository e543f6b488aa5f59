"""Exceptions raised by the chunk listing core.

This module provides:
- ChunkListingError: Base class for every core failure
- InvalidHashLengthError: Digest of the wrong size
- InvalidChunkLengthError: Chunk length that is zero, negative or too large
- MalformedListingError: Wire bytes that do not decode into a listing
- ListingStoreError: Listing store that cannot be read or written
- ListingNotFoundError: Backup version missing from a listing store

Lookup misses are not errors: has_chunk() returns False and
get_chunk_entry() returns None.
"""

from __future__ import annotations


class ChunkListingError(Exception):
    """Base exception for chunk listing errors."""


class InvalidHashLengthError(ChunkListingError):
    """Raised when a chunk digest does not have the fixed hash length.

    Attributes:
        length: Length of the rejected digest.
        expected: Required digest length.
    """

    def __init__(self, length: int, expected: int) -> None:
        self.length = length
        self.expected = expected
        super().__init__(f"Chunk hash must be {expected} bytes, got {length}")


class InvalidChunkLengthError(ChunkListingError):
    """Raised when a chunk length is not positive or does not fit an int64.

    Attributes:
        index: Position of the chunk in the ordered input.
        length: The rejected length.
    """

    def __init__(self, index: int, length: object) -> None:
        self.index = index
        self.length = length
        super().__init__(f"Chunk {index} has invalid length {length!r}")


class MalformedListingError(ChunkListingError):
    """Raised when wire bytes do not parse into valid chunk records.

    Attributes:
        offset: Byte offset in the buffer where decoding failed.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)


class ListingStoreError(ChunkListingError):
    """Raised when the listing store cannot be read or written."""


class ListingNotFoundError(ListingStoreError):
    """Raised when a listing version is not in the store."""
