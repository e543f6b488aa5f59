"""Per-version storage of serialized chunk listings.

This module provides:
- Abstract interface for listing storage
- LocalFSListingStore for keeping one listing blob per backup version
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from chunkvault.core.errors import ListingNotFoundError, ListingStoreError
from chunkvault.core.listing import ChunkListing

logger = logging.getLogger(__name__)

LISTING_SUFFIX = ".listing"


class ListingStore(ABC):
    """Abstract interface for listing storage.

    Versions are positive integers; a higher version is a newer backup.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Return a human-readable description of where listings are stored."""

    @abstractmethod
    def put(self, version: int, listing: ChunkListing) -> None:
        """Store the listing of a backup version, replacing any previous one.

        Args:
            version: Backup version number.
            listing: Listing to store.
        """

    @abstractmethod
    def get(self, version: int) -> ChunkListing:
        """Load the listing of a backup version.

        Args:
            version: Backup version number.

        Returns:
            Decoded listing.

        Raises:
            ListingNotFoundError: If the version doesn't exist.
            MalformedListingError: If the stored bytes are corrupt.
        """

    @abstractmethod
    def exists(self, version: int) -> bool:
        """Check if a version is stored."""

    @abstractmethod
    def delete(self, version: int) -> bool:
        """Delete a version.

        Returns:
            True if the version was deleted, False if it didn't exist.
        """

    @abstractmethod
    def versions(self) -> list[int]:
        """Return stored versions in ascending order."""

    def latest_version(self) -> int | None:
        """Return the newest stored version, or None if the store is empty."""
        versions = self.versions()
        return versions[-1] if versions else None

    def latest(self) -> ChunkListing:
        """Load the newest listing.

        Returns:
            The newest listing, or an empty listing if nothing is stored yet.
        """
        version = self.latest_version()
        if version is None:
            return ChunkListing()
        return self.get(version)


def _check_version(version: int) -> None:
    if isinstance(version, bool) or not isinstance(version, int) or version <= 0:
        raise ValueError(f"Version must be a positive integer, got {version!r}")


class LocalFSListingStore(ListingStore):
    """Local filesystem storage, one file per version.

    Files are named after the zero-padded version number so that
    directory listings sort naturally.
    """

    def __init__(self, base_path: Path | str) -> None:
        """Initialize local storage.

        Args:
            base_path: Directory holding the listing files.
        """
        self._base_path = Path(base_path).resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def location(self) -> str:
        """Return the local storage path."""
        return f"Local filesystem: {self._base_path}"

    def _listing_path(self, version: int) -> Path:
        """Get the file path for a version."""
        _check_version(version)
        return self._base_path / f"{version:010d}{LISTING_SUFFIX}"

    def put(self, version: int, listing: ChunkListing) -> None:
        """Store a listing atomically (temp file + rename)."""
        path = self._listing_path(version)
        data = listing.write_to_wire()
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self._base_path, suffix=".tmp")
        except OSError as e:
            raise ListingStoreError(f"Cannot write listing version {version}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise ListingStoreError(f"Cannot write listing version {version}: {e}") from e
        logger.info(
            "Stored listing version %d (%d chunks, %d bytes)", version, len(listing), len(data)
        )

    def get(self, version: int) -> ChunkListing:
        """Load a listing."""
        path = self._listing_path(version)
        if not path.exists():
            raise ListingNotFoundError(f"Listing not found: version {version}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ListingStoreError(f"Cannot read listing version {version}: {e}") from e
        return ChunkListing.read_from_wire(data)

    def exists(self, version: int) -> bool:
        """Check if a version exists."""
        return self._listing_path(version).exists()

    def delete(self, version: int) -> bool:
        """Delete a version."""
        path = self._listing_path(version)
        if path.exists():
            path.unlink()
            logger.info("Deleted listing version %d", version)
            return True
        return False

    def versions(self) -> list[int]:
        """Return stored versions in ascending order."""
        found = []
        for path in self._base_path.glob(f"*{LISTING_SUFFIX}"):
            stem = path.name[: -len(LISTING_SUFFIX)]
            if stem.isdigit() and int(stem) > 0:
                found.append(int(stem))
        return sorted(found)
