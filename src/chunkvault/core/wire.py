"""Binary wire format for chunk listings.

The encoding is protocol-buffers compatible:

    message Chunk {
        bytes hash = 1;    // exactly HASH_LENGTH_BYTES
        int64 length = 2;  // > 0
    }
    message ChunkListing {
        repeated Chunk chunks = 1;
    }

A listing is the chunk records written back to back with no header, so an
empty buffer is a listing with zero chunks. Offsets are never encoded.
Unknown fields are skipped on decode, which lets newer writers append
optional fields without breaking older readers.

All functions operate on in-memory buffers and perform no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Union

from chunkvault.core.errors import MalformedListingError
from chunkvault.core.hashing import HASH_LENGTH_BYTES, ChunkHash

BytesLike = Union[bytes, bytearray, memoryview]

# Wire types
WIRE_VARINT = 0
WIRE_I64 = 1
WIRE_LEN = 2
WIRE_I32 = 5

# Field numbers (stable, additive-only)
LISTING_CHUNKS = 1
CHUNK_HASH = 1
CHUNK_LENGTH = 2

MAX_VARINT_BYTES = 10
MAX_CHUNK_LENGTH = (1 << 63) - 1  # LENGTH is an int64 on the wire
_INT64_SIGN = 1 << 63
_UINT64_LIMIT = 1 << 64


# -----------------------------------------------------------------------------
# Varints
# -----------------------------------------------------------------------------

def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as an unsigned LEB128 varint."""
    if value < 0:
        raise ValueError("varint cannot encode negative values")
    if value >= _UINT64_LIMIT:
        raise ValueError("varint cannot encode values above 64 bits")
    out = bytearray()
    while True:
        to_write = value & 0x7F
        value >>= 7
        if value:
            out.append(to_write | 0x80)
        else:
            out.append(to_write)
            return bytes(out)


def decode_varint(buf: BytesLike, offset: int = 0, end: int | None = None) -> tuple[int, int]:
    """Decode a varint from buf starting at offset.

    Args:
        buf: Buffer to read from.
        offset: Position of the first varint byte.
        end: Position the varint must not run past (defaults to len(buf)).

    Returns:
        (value, new_offset)

    Raises:
        MalformedListingError: If the varint runs past end or is longer
            than 10 bytes.
    """
    if end is None:
        end = len(buf)
    result = 0
    shift = 0
    i = offset
    while i < end:
        b = buf[i]
        result |= (b & 0x7F) << shift
        i += 1
        if not b & 0x80:
            return result & (_UINT64_LIMIT - 1), i
        shift += 7
        if i - offset >= MAX_VARINT_BYTES:
            raise MalformedListingError("Varint too long", offset)
    raise MalformedListingError("Buffer ended inside varint", offset)


def _as_int64(value: int) -> int:
    """Interpret a decoded 64-bit varint as a signed int64."""
    return value - _UINT64_LIMIT if value & _INT64_SIGN else value


def _tag(field_number: int, wire_type: int) -> bytes:
    return encode_varint((field_number << 3) | wire_type)


def _len_field(field_number: int, payload: bytes) -> bytes:
    return _tag(field_number, WIRE_LEN) + encode_varint(len(payload)) + payload


# -----------------------------------------------------------------------------
# Field scanning
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class _Field:
    """One decoded field of a message.

    For VARINT fields ``varint`` holds the value. For every other wire type
    the payload is ``buf[start:end]``.
    """

    number: int
    wire_type: int
    offset: int
    varint: int = 0
    start: int = 0
    end: int = 0


def _iter_fields(buf: memoryview, start: int, end: int) -> Iterator[_Field]:
    """Yield the fields of the message stored in buf[start:end]."""
    i = start
    while i < end:
        field_offset = i
        key, i = decode_varint(buf, i, end)
        number = key >> 3
        wire_type = key & 0x07
        if number == 0:
            raise MalformedListingError("Invalid field number 0", field_offset)

        if wire_type == WIRE_VARINT:
            value, i = decode_varint(buf, i, end)
            yield _Field(number, wire_type, field_offset, varint=value)
            continue

        if wire_type == WIRE_LEN:
            size, i = decode_varint(buf, i, end)
        elif wire_type == WIRE_I64:
            size = 8
        elif wire_type == WIRE_I32:
            size = 4
        else:
            raise MalformedListingError(f"Unsupported wire type {wire_type}", field_offset)

        if size > end - i:
            raise MalformedListingError("Field overruns buffer", field_offset)
        yield _Field(number, wire_type, field_offset, start=i, end=i + size)
        i += size


def _decode_chunk(buf: memoryview, record: _Field) -> tuple[ChunkHash, int]:
    """Decode the Chunk message carried by a listing-level field."""
    digest: bytes | None = None
    length: int | None = None

    for field in _iter_fields(buf, record.start, record.end):
        if field.number == CHUNK_HASH:
            if field.wire_type != WIRE_LEN:
                raise MalformedListingError("Chunk hash must be length-delimited", field.offset)
            size = field.end - field.start
            if size != HASH_LENGTH_BYTES:
                raise MalformedListingError(
                    f"Chunk hash must be {HASH_LENGTH_BYTES} bytes, got {size}", field.offset
                )
            digest = bytes(buf[field.start : field.end])
        elif field.number == CHUNK_LENGTH:
            if field.wire_type != WIRE_VARINT:
                raise MalformedListingError("Chunk length must be a varint", field.offset)
            length = _as_int64(field.varint)
        # Unknown fields are skipped

    if digest is None:
        raise MalformedListingError("Chunk record has no hash", record.offset)
    if length is None:
        raise MalformedListingError("Chunk record has no length", record.offset)
    if length <= 0:
        raise MalformedListingError(f"Chunk record has invalid length {length}", record.offset)
    return ChunkHash(digest), length


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def encode_chunk_record(chunk_hash: ChunkHash, length: int) -> bytes:
    """Encode one chunk as a listing-level ``chunks`` field.

    Args:
        chunk_hash: Hash of the chunk.
        length: Chunk length in bytes.

    Returns:
        Tag, length prefix and the encoded Chunk message.
    """
    body = _len_field(CHUNK_HASH, chunk_hash.digest)
    body += _tag(CHUNK_LENGTH, WIRE_VARINT) + encode_varint(length)
    return _len_field(LISTING_CHUNKS, body)


def encode_listing(records: Iterable[tuple[ChunkHash, int]]) -> bytes:
    """Encode ordered (hash, length) pairs as a listing."""
    return b"".join(encode_chunk_record(h, length) for h, length in records)


def iter_chunk_records(data: BytesLike) -> Iterator[tuple[ChunkHash, int]]:
    """Decode a listing into (hash, length) pairs in encounter order.

    Unknown listing-level fields and unknown record fields are skipped.
    Records decoded before a failure have already been yielded; use
    decode_listing() to get all-or-nothing behaviour.

    Args:
        data: Serialized listing; may be empty.

    Yields:
        (ChunkHash, length) for each record.

    Raises:
        MalformedListingError: If the bytes are not a valid listing.
    """
    buf = memoryview(data).cast("B")
    for field in _iter_fields(buf, 0, len(buf)):
        if field.number != LISTING_CHUNKS:
            continue
        if field.wire_type != WIRE_LEN:
            raise MalformedListingError("Chunk record must be length-delimited", field.offset)
        yield _decode_chunk(buf, field)


def decode_listing(data: BytesLike) -> list[tuple[ChunkHash, int]]:
    """Decode a whole listing, failing before returning anything partial."""
    return list(iter_chunk_records(data))
