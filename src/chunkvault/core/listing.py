"""Chunk listing: the manifest of one backup version.

This module provides:
- ChunkEntry: Position and size of one chunk in the payload
- ChunkListing: Ordered chunk entries with an O(1) hash index,
  serializable to and from the wire format

Offsets are never stored. They are always derived as a running sum of
lengths, whether the listing is built from chunker output or decoded
from wire bytes.

When the same hash occurs more than once, every occurrence keeps its own
entry (and offset) in the ordered sequence, and the hash index points at
the first occurrence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from chunkvault.core.errors import InvalidChunkLengthError
from chunkvault.core.hashing import ChunkHash
from chunkvault.core.wire import MAX_CHUNK_LENGTH, BytesLike, decode_listing, encode_listing


@dataclass(frozen=True)
class ChunkEntry:
    """A chunk's place in the payload.

    Attributes:
        hash: Content hash of the chunk.
        start: Byte offset of the chunk within the payload.
        length: Chunk size in bytes (always > 0).
    """

    hash: ChunkHash
    start: int
    length: int

    @property
    def end(self) -> int:
        """Return the offset just past the chunk."""
        return self.start + self.length


def _check_chunk(index: int, chunk_hash: object, length: object) -> None:
    if not isinstance(chunk_hash, ChunkHash):
        raise TypeError(
            f"Chunk {index} hash must be a ChunkHash, got {type(chunk_hash).__name__}"
        )
    # bool is an int subclass but never a length
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidChunkLengthError(index, length)
    if not 0 < length <= MAX_CHUNK_LENGTH:
        raise InvalidChunkLengthError(index, length)


class ChunkListing:
    """Ordered manifest of the chunks composing a payload.

    Instances are immutable; use build() or read_from_wire() to create one.
    """

    def __init__(self, entries: Iterable[ChunkEntry] = ()) -> None:
        """Initialize from ready-made entries (prefer build/read_from_wire).

        Args:
            entries: Entries in payload order with consistent offsets.

        Raises:
            InvalidChunkLengthError: If an entry's length is not in
                1..MAX_CHUNK_LENGTH.
            ValueError: If an entry does not start where the previous one ends.
            TypeError: If an entry or its hash has the wrong type.
        """
        self._entries: tuple[ChunkEntry, ...] = tuple(entries)
        index: dict[ChunkHash, ChunkEntry] = {}
        expected_start = 0
        for i, entry in enumerate(self._entries):
            if not isinstance(entry, ChunkEntry):
                raise TypeError(f"Entry {i} must be a ChunkEntry, got {type(entry).__name__}")
            _check_chunk(i, entry.hash, entry.length)
            if entry.start != expected_start:
                raise ValueError(
                    f"Chunk {i} starts at {entry.start}, expected {expected_start}"
                )
            expected_start = entry.end
            index.setdefault(entry.hash, entry)
        self._index = index

    @classmethod
    def build(cls, ordered_chunks: Iterable[tuple[ChunkHash, int]]) -> ChunkListing:
        """Build a listing from chunker output.

        Args:
            ordered_chunks: (hash, length) pairs in payload order.

        Returns:
            New ChunkListing with offsets computed as a running sum.

        Raises:
            InvalidChunkLengthError: If any length is not an integer in
                1..MAX_CHUNK_LENGTH.
            TypeError: If any hash is not a ChunkHash.
        """
        entries: list[ChunkEntry] = []
        start = 0
        for i, (chunk_hash, length) in enumerate(ordered_chunks):
            _check_chunk(i, chunk_hash, length)
            entries.append(ChunkEntry(hash=chunk_hash, start=start, length=length))
            start += length
        return cls(entries)

    @classmethod
    def read_from_wire(cls, data: BytesLike) -> ChunkListing:
        """Decode a listing from its wire bytes.

        Args:
            data: Serialized listing. Empty input gives an empty listing.

        Returns:
            Decoded ChunkListing.

        Raises:
            MalformedListingError: If data is not a valid listing.
        """
        return cls.build(decode_listing(data))

    def write_to_wire(self) -> bytes:
        """Serialize the listing as (hash, length) records in order."""
        return encode_listing((entry.hash, entry.length) for entry in self._entries)

    def has_chunk(self, chunk_hash: ChunkHash) -> bool:
        """Check whether a chunk is part of this listing."""
        return chunk_hash in self._index

    def get_chunk_entry(self, chunk_hash: ChunkHash) -> ChunkEntry | None:
        """Get the entry for a chunk.

        Args:
            chunk_hash: Hash to look up.

        Returns:
            The chunk's entry (the first one for a repeated hash),
            or None if the chunk is not in the listing.
        """
        return self._index.get(chunk_hash)

    def get_chunk_count(self) -> int:
        """Return the number of entries in the listing."""
        return len(self._entries)

    @property
    def entries(self) -> tuple[ChunkEntry, ...]:
        """Entries in payload order."""
        return self._entries

    @property
    def hashes(self) -> frozenset[ChunkHash]:
        """Distinct chunk hashes in the listing."""
        return frozenset(self._index)

    @property
    def total_length(self) -> int:
        """Size of the payload described by the listing."""
        if not self._entries:
            return 0
        return self._entries[-1].end

    def __contains__(self, chunk_hash: object) -> bool:
        return chunk_hash in self._index

    def __iter__(self) -> Iterator[ChunkEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChunkListing):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"ChunkListing(chunks={len(self._entries)}, total_length={self.total_length})"
