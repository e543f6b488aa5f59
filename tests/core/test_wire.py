"""Tests for the listing wire codec."""

import pytest

from chunkvault.core.errors import MalformedListingError
from chunkvault.core.hashing import HASH_LENGTH_BYTES, ChunkHash
from chunkvault.core.wire import (
    decode_listing,
    decode_varint,
    encode_chunk_record,
    encode_listing,
    encode_varint,
    iter_chunk_records,
)

HASH_A = ChunkHash(b"A" * HASH_LENGTH_BYTES)
HASH_B = ChunkHash(b"B" * HASH_LENGTH_BYTES)


def record(body: bytes) -> bytes:
    """Wrap a Chunk message body as a listing-level field 1."""
    return b"\x0a" + encode_varint(len(body)) + body


def hash_field(digest: bytes) -> bytes:
    return b"\x0a" + encode_varint(len(digest)) + digest


def length_field(value: int) -> bytes:
    return b"\x10" + encode_varint(value)


class TestVarint:
    """Tests for varint encoding."""

    @pytest.mark.parametrize(
        ("value", "encoded"),
        [
            (0, b"\x00"),
            (1, b"\x01"),
            (127, b"\x7f"),
            (128, b"\x80\x01"),
            (300, b"\xac\x02"),
            (2**64 - 1, b"\xff" * 9 + b"\x01"),
        ],
    )
    def test_known_encodings(self, value: int, encoded: bytes) -> None:
        """Varints match the protocol buffers encoding."""
        assert encode_varint(value) == encoded
        assert decode_varint(encoded) == (value, len(encoded))

    def test_decode_at_offset(self) -> None:
        """Decoding starts at the given offset and returns the next one."""
        assert decode_varint(b"\xff\xac\x02\x05", 1) == (300, 3)

    def test_encode_negative_raises(self) -> None:
        """Negative values can't be encoded."""
        with pytest.raises(ValueError):
            encode_varint(-1)

    def test_encode_too_large_raises(self) -> None:
        """Values above 64 bits can't be encoded."""
        with pytest.raises(ValueError):
            encode_varint(2**64)

    def test_decode_truncated(self) -> None:
        """A varint cut short raises MalformedListingError."""
        with pytest.raises(MalformedListingError, match="ended inside varint"):
            decode_varint(b"\x80\x80")

    def test_decode_too_long(self) -> None:
        """More than 10 varint bytes is malformed."""
        with pytest.raises(MalformedListingError, match="too long"):
            decode_varint(b"\xff" * 11)


class TestEncoding:
    """Tests for encoding listings."""

    def test_record_layout(self) -> None:
        """A record is field 1 holding hash (field 1) and length (field 2)."""
        encoded = encode_chunk_record(HASH_A, 256)
        inner = b"\x0a\x20" + HASH_A.digest + b"\x10\x80\x02"
        assert encoded == b"\x0a" + bytes([len(inner)]) + inner

    def test_empty_listing_is_empty_bytes(self) -> None:
        """No records encode to no bytes."""
        assert encode_listing([]) == b""

    def test_records_written_in_order(self) -> None:
        """Records are concatenated in input order."""
        encoded = encode_listing([(HASH_A, 1), (HASH_B, 2)])
        assert encoded == encode_chunk_record(HASH_A, 1) + encode_chunk_record(HASH_B, 2)

    def test_encode_decode_preserves_order(self) -> None:
        """Decoding yields the records in the order they were written."""
        records = [(HASH_B, 4055), (HASH_A, 32), (HASH_B, 1)]
        assert decode_listing(encode_listing(records)) == records


class TestDecoding:
    """Tests for decoding well-formed input."""

    def test_empty_input(self) -> None:
        """Empty input is a listing with no chunks."""
        assert decode_listing(b"") == []

    def test_accepts_bytearray_and_memoryview(self) -> None:
        """Any bytes-like buffer can be decoded."""
        encoded = encode_chunk_record(HASH_A, 10)
        assert decode_listing(bytearray(encoded)) == [(HASH_A, 10)]
        assert decode_listing(memoryview(encoded)) == [(HASH_A, 10)]

    def test_fields_in_any_order(self) -> None:
        """Length may come before hash inside a record."""
        data = record(length_field(77) + hash_field(HASH_A.digest))
        assert decode_listing(data) == [(HASH_A, 77)]

    def test_skips_unknown_record_fields(self) -> None:
        """Unknown varint, fixed32, fixed64 and bytes fields are skipped."""
        body = (
            hash_field(HASH_A.digest)
            + b"\x18\x96\x01"  # field 3, varint
            + b"\x25" + b"\x01\x02\x03\x04"  # field 4, fixed32
            + b"\x29" + b"\x00" * 8  # field 5, fixed64
            + b"\x32\x03abc"  # field 6, bytes
            + length_field(5)
        )
        assert decode_listing(record(body)) == [(HASH_A, 5)]

    def test_skips_unknown_listing_fields(self) -> None:
        """Unknown top-level fields around the records are skipped."""
        data = (
            b"\x12\x04salt"  # field 2, bytes
            + encode_chunk_record(HASH_A, 1)
            + b"\x18\x02"  # field 3, varint
            + encode_chunk_record(HASH_B, 2)
            + b"\x2d\x00\x00\x00\x00"  # field 5, fixed32
        )
        assert decode_listing(data) == [(HASH_A, 1), (HASH_B, 2)]

    def test_repeated_length_last_wins(self) -> None:
        """A repeated scalar field keeps its last value."""
        data = record(hash_field(HASH_A.digest) + length_field(1) + length_field(9))
        assert decode_listing(data) == [(HASH_A, 9)]

    def test_iter_is_lazy(self) -> None:
        """iter_chunk_records yields records before reaching later garbage."""
        data = encode_chunk_record(HASH_A, 1) + b"\x0a\x7f"
        records = iter_chunk_records(data)
        assert next(records) == (HASH_A, 1)
        with pytest.raises(MalformedListingError):
            next(records)


class TestMalformedInput:
    """Tests for rejecting malformed input."""

    @pytest.mark.parametrize(
        "data",
        [
            pytest.param(record(length_field(5)), id="missing-hash"),
            pytest.param(record(hash_field(HASH_A.digest)), id="missing-length"),
            pytest.param(record(b""), id="empty-record"),
            pytest.param(record(hash_field(HASH_A.digest) + length_field(0)), id="zero-length"),
            pytest.param(
                record(hash_field(HASH_A.digest) + b"\x10" + b"\xff" * 9 + b"\x01"),
                id="negative-length",
            ),
            pytest.param(record(hash_field(b"x" * 31) + length_field(5)), id="short-hash"),
            pytest.param(record(hash_field(b"x" * 33) + length_field(5)), id="long-hash"),
            pytest.param(record(hash_field(b"") + length_field(5)), id="empty-hash"),
            pytest.param(record(b"\x08\x01" + length_field(5)), id="hash-as-varint"),
            pytest.param(
                record(hash_field(HASH_A.digest) + b"\x12\x01\x05"), id="length-as-bytes"
            ),
            pytest.param(b"\x08\x01", id="record-as-varint"),
            pytest.param(b"\x0a\x05\x0a", id="record-overruns-buffer"),
            pytest.param(b"\x0a\x80", id="truncated-size"),
            pytest.param(encode_chunk_record(HASH_A, 1)[:-1], id="truncated-record"),
            pytest.param(b"\x0b", id="group-wire-type"),
            pytest.param(b"\x02\x00", id="field-number-zero"),
            pytest.param(b"\x0a" + b"\xff" * 11, id="varint-too-long"),
            pytest.param(b"\x15\x00\x00", id="truncated-fixed32"),
        ],
    )
    def test_rejected(self, data: bytes) -> None:
        """Malformed input raises MalformedListingError."""
        with pytest.raises(MalformedListingError):
            decode_listing(data)

    def test_no_partial_result(self) -> None:
        """A bad record after good ones fails the whole decode."""
        data = encode_chunk_record(HASH_A, 1) + record(length_field(5))
        with pytest.raises(MalformedListingError, match="no hash"):
            decode_listing(data)

    def test_error_reports_offset(self) -> None:
        """The error carries the offset of the failing record."""
        good = encode_chunk_record(HASH_A, 1)
        with pytest.raises(MalformedListingError) as exc_info:
            decode_listing(good + record(length_field(5)))
        assert exc_info.value.offset == len(good)
