"""Tests for listing storage implementations."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from chunkvault.core.errors import ChunkListingError, MalformedListingError
from chunkvault.core.hashing import ChunkHash
from chunkvault.core.listing import ChunkListing
from chunkvault.store import (
    ListingNotFoundError,
    ListingStore,
    ListingStoreError,
    LocalFSListingStore,
)

MakeHash = Callable[[str], ChunkHash]


@pytest.fixture
def store(tmp_path: Path) -> LocalFSListingStore:
    """Create a LocalFSListingStore instance for testing."""
    return LocalFSListingStore(tmp_path / "listings")


@pytest.fixture
def listing(make_hash: MakeHash) -> ChunkListing:
    """A small three-chunk listing."""
    return ChunkListing.build([
        (make_hash("A"), 32),
        (make_hash("B"), 1024),
        (make_hash("C"), 4055),
    ])


class TestLocalFSListingStore:
    """Tests for LocalFSListingStore implementation."""

    def test_is_listing_store(self, store: LocalFSListingStore) -> None:
        """LocalFSListingStore implements the ListingStore interface."""
        assert isinstance(store, ListingStore)

    def test_creates_base_directory(self, tmp_path: Path) -> None:
        """The base directory is created on init."""
        LocalFSListingStore(tmp_path / "a" / "b")
        assert (tmp_path / "a" / "b").is_dir()

    def test_location(self, store: LocalFSListingStore, tmp_path: Path) -> None:
        """location names the base directory."""
        assert "Local filesystem" in store.location
        assert str((tmp_path / "listings").resolve()) in store.location

    def test_put_then_get(self, store: LocalFSListingStore, listing: ChunkListing) -> None:
        """A stored listing is read back equal."""
        store.put(1, listing)
        assert store.get(1) == listing

    def test_put_writes_wire_bytes(
        self, store: LocalFSListingStore, listing: ChunkListing, tmp_path: Path
    ) -> None:
        """The file holds exactly the listing's wire bytes."""
        store.put(7, listing)
        path = tmp_path / "listings" / "0000000007.listing"
        assert path.read_bytes() == listing.write_to_wire()

    def test_put_leaves_no_temp_files(
        self, store: LocalFSListingStore, listing: ChunkListing, tmp_path: Path
    ) -> None:
        """Only the listing file remains after a write."""
        store.put(1, listing)
        assert [p.name for p in (tmp_path / "listings").iterdir()] == ["0000000001.listing"]

    def test_put_replaces(
        self, store: LocalFSListingStore, listing: ChunkListing, make_hash: MakeHash
    ) -> None:
        """Putting a version again replaces it."""
        store.put(1, listing)
        replacement = ChunkListing.build([(make_hash("Z"), 5)])
        store.put(1, replacement)
        assert store.get(1) == replacement

    def test_empty_listing_roundtrip(self, store: LocalFSListingStore) -> None:
        """An empty listing is stored as an empty file and read back."""
        store.put(1, ChunkListing())
        assert store.get(1).get_chunk_count() == 0

    def test_get_raises_on_missing(self, store: LocalFSListingStore) -> None:
        """get() should raise ListingNotFoundError for missing versions."""
        with pytest.raises(ListingNotFoundError, match="Listing not found"):
            store.get(3)

    def test_not_found_is_store_error(self, store: LocalFSListingStore) -> None:
        """ListingNotFoundError is a ListingStoreError."""
        with pytest.raises(ListingStoreError):
            store.get(3)

    def test_store_errors_share_core_base(self, store: LocalFSListingStore) -> None:
        """Store errors can be caught with the core base exception."""
        with pytest.raises(ChunkListingError):
            store.get(3)

    def test_get_corrupt_raises(self, store: LocalFSListingStore, tmp_path: Path) -> None:
        """A corrupt file raises MalformedListingError, not an empty listing."""
        (tmp_path / "listings" / "0000000001.listing").write_bytes(b"\x0a\x7f")
        with pytest.raises(MalformedListingError):
            store.get(1)

    def test_exists(self, store: LocalFSListingStore, listing: ChunkListing) -> None:
        """exists() reflects stored versions."""
        assert not store.exists(1)
        store.put(1, listing)
        assert store.exists(1)

    def test_delete(self, store: LocalFSListingStore, listing: ChunkListing) -> None:
        """delete() removes a version and reports whether it existed."""
        store.put(1, listing)
        assert store.delete(1) is True
        assert not store.exists(1)
        assert store.delete(1) is False

    @pytest.mark.parametrize("version", [0, -1, True, "1"])
    def test_invalid_version(self, store: LocalFSListingStore, version: object) -> None:
        """Versions must be positive ints."""
        with pytest.raises(ValueError, match="Version"):
            store.exists(version)  # type: ignore[arg-type]


class TestVersions:
    """Tests for version enumeration."""

    def test_empty_store(self, store: LocalFSListingStore) -> None:
        """An empty store has no versions and an empty latest listing."""
        assert store.versions() == []
        assert store.latest_version() is None
        assert store.latest().get_chunk_count() == 0

    def test_versions_sorted(self, store: LocalFSListingStore, listing: ChunkListing) -> None:
        """versions() returns stored versions in ascending numeric order."""
        for version in (10, 2, 1):
            store.put(version, listing)
        assert store.versions() == [1, 2, 10]
        assert store.latest_version() == 10

    def test_latest_returns_newest(
        self, store: LocalFSListingStore, listing: ChunkListing, make_hash: MakeHash
    ) -> None:
        """latest() loads the highest version."""
        newest = ChunkListing.build([(make_hash("N"), 1)])
        store.put(1, listing)
        store.put(2, newest)
        assert store.latest() == newest

    def test_ignores_foreign_files(
        self, store: LocalFSListingStore, listing: ChunkListing, tmp_path: Path
    ) -> None:
        """Files that aren't version listings are ignored."""
        store.put(1, listing)
        (tmp_path / "listings" / "notes.txt").write_text("x")
        (tmp_path / "listings" / "draft.listing").write_bytes(b"")
        (tmp_path / "listings" / "0000000000.listing").write_bytes(b"")
        assert store.versions() == [1]
