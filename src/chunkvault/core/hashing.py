"""Chunk identity for chunkvault.

This module provides:
- ChunkHash: Immutable fixed-length digest used as the key for chunks
- ChunkHasher: Computes a ChunkHash from chunk plaintext
  (HMAC-SHA256 with a secret key, plain SHA-256 without one)
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes, hmac

from chunkvault.core.errors import InvalidHashLengthError

HASH_LENGTH_BYTES = 32  # SHA-256 digest size
HASH_KEY_SIZE = 32  # 256-bit HMAC key


@dataclass(frozen=True, order=True)
class ChunkHash:
    """Digest of a chunk's plaintext content.

    Two hashes are equal when their bytes are equal, and they order by
    lexicographic byte comparison, so sorted() is deterministic.

    Attributes:
        digest: Raw digest bytes, exactly HASH_LENGTH_BYTES long.
    """

    digest: bytes

    def __post_init__(self) -> None:
        """Freeze the digest to bytes and check its length."""
        digest = self.digest
        if isinstance(digest, (bytearray, memoryview)):
            digest = bytes(digest)
            object.__setattr__(self, "digest", digest)
        elif not isinstance(digest, bytes):
            raise TypeError(f"Chunk hash must be bytes, got {type(digest).__name__}")
        if len(digest) != HASH_LENGTH_BYTES:
            raise InvalidHashLengthError(len(digest), HASH_LENGTH_BYTES)

    @classmethod
    def from_hex(cls, value: str) -> ChunkHash:
        """Parse a hex-encoded digest.

        Args:
            value: 64 hex characters.

        Returns:
            The decoded ChunkHash.

        Raises:
            ValueError: If value is not valid hex.
            InvalidHashLengthError: If the decoded digest has the wrong size.
        """
        return cls(bytes.fromhex(value))

    def hex(self) -> str:
        """Return the digest as lowercase hex."""
        return self.digest.hex()

    def __bytes__(self) -> bytes:
        return self.digest

    def __repr__(self) -> str:
        return f"ChunkHash({self.digest.hex()[:16]}...)"

    def __str__(self) -> str:
        return self.hex()


def generate_hash_key() -> bytes:
    """Generate a random secret key for ChunkHasher.

    Returns:
        32 bytes of random data.
    """
    return os.urandom(HASH_KEY_SIZE)


class ChunkHasher:
    """Computes chunk hashes from plaintext.

    With a key, the digest is HMAC-SHA256(key, plaintext), so identical
    content only maps to the same hash for holders of the same key.
    Without a key it is a plain SHA-256 of the plaintext.
    """

    def __init__(self, key: bytes | None = None) -> None:
        """Initialize the hasher.

        Args:
            key: Optional 32-byte secret key.

        Raises:
            ValueError: If the key has the wrong size.
        """
        if key is not None and len(key) != HASH_KEY_SIZE:
            raise ValueError(f"Hash key must be {HASH_KEY_SIZE} bytes, got {len(key)}")
        self._key = key

    @property
    def is_keyed(self) -> bool:
        """Check whether digests are keyed (HMAC)."""
        return self._key is not None

    def hash(self, data: bytes) -> ChunkHash:
        """Compute the hash of a chunk.

        Args:
            data: Chunk plaintext.

        Returns:
            ChunkHash of the data.
        """
        if self._key is None:
            return ChunkHash(hashlib.sha256(data).digest())
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(data)
        return ChunkHash(mac.finalize())
