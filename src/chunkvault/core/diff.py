"""Diff of two chunk listings.

Partitions chunk hashes between a previous listing (old) and the current
one (new):
- unchanged: in both, nothing to transfer
- added: only in new, must be encrypted and uploaded
- removed: only in old, candidates for reclamation once no other
  version references them

The sets are computed from the listings' hash indices in O(n + m).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chunkvault.core.hashing import ChunkHash
from chunkvault.core.listing import ChunkListing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkListingDiff:
    """Result of comparing two listings.

    Attributes:
        unchanged: Hashes present in both listings.
        added: Hashes present only in the new listing.
        removed: Hashes present only in the old listing.
        bytes_added: Total length of the added chunks.
        bytes_removed: Total length of the removed chunks.
    """

    unchanged: frozenset[ChunkHash]
    added: frozenset[ChunkHash]
    removed: frozenset[ChunkHash]
    bytes_added: int = 0
    bytes_removed: int = 0

    @classmethod
    def compute(cls, old: ChunkListing, new: ChunkListing) -> ChunkListingDiff:
        """Compare two listings.

        Args:
            old: Baseline listing (empty for a first backup).
            new: Listing of the current payload.

        Returns:
            The partition of hashes between the two listings.
        """
        old_hashes = old.hashes
        new_hashes = new.hashes

        added = new_hashes - old_hashes
        removed = old_hashes - new_hashes
        diff = cls(
            unchanged=new_hashes & old_hashes,
            added=added,
            removed=removed,
            bytes_added=_sum_lengths(new, added),
            bytes_removed=_sum_lengths(old, removed),
        )
        logger.debug(
            "Listing diff: %d unchanged, %d added (%d bytes), %d removed (%d bytes)",
            len(diff.unchanged),
            len(added),
            diff.bytes_added,
            len(removed),
            diff.bytes_removed,
        )
        return diff

    @property
    def has_changes(self) -> bool:
        """Check whether any chunk was added or removed."""
        return bool(self.added or self.removed)

    def sorted_added(self) -> list[ChunkHash]:
        """Added hashes in byte order."""
        return sorted(self.added)

    def sorted_removed(self) -> list[ChunkHash]:
        """Removed hashes in byte order."""
        return sorted(self.removed)

    def sorted_unchanged(self) -> list[ChunkHash]:
        """Unchanged hashes in byte order."""
        return sorted(self.unchanged)

    def upload_order(self, new: ChunkListing) -> list[ChunkHash]:
        """Added hashes in the order they appear in the new payload.

        Args:
            new: The listing this diff was computed against.

        Returns:
            Each added hash once, by first physical occurrence.
        """
        order: list[ChunkHash] = []
        seen: set[ChunkHash] = set()
        for entry in new:
            if entry.hash in self.added and entry.hash not in seen:
                seen.add(entry.hash)
                order.append(entry.hash)
        return order


def _sum_lengths(listing: ChunkListing, hashes: frozenset[ChunkHash]) -> int:
    """Sum the indexed lengths of the given hashes."""
    total = 0
    for chunk_hash in hashes:
        entry = listing.get_chunk_entry(chunk_hash)
        if entry is not None:
            total += entry.length
    return total


def diff_listings(old: ChunkListing, new: ChunkListing) -> ChunkListingDiff:
    """Compare two listings (shorthand for ChunkListingDiff.compute)."""
    return ChunkListingDiff.compute(old, new)
