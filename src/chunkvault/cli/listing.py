"""Listing commands for chunkvault CLI.

Commands:
- build: Chunk a file and write its listing
- show: Print the entries of a listing
- diff: Compare two listings
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from chunkvault.cli.config import get_chunking_config, resolve_hash_key
from chunkvault.core.chunking import build_file_listing
from chunkvault.core.config import ChunkingConfig
from chunkvault.core.diff import ChunkListingDiff
from chunkvault.core.errors import ChunkListingError
from chunkvault.core.hashing import ChunkHasher
from chunkvault.core.listing import ChunkListing

logger = logging.getLogger(__name__)


def chunking_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the chunk size and hash key options to a command."""
    func = click.option(
        "--key-file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Hash key file (defaults to the configured key).",
    )(func)
    func = click.option("--max-size", type=int, help="Maximum chunk size in bytes.")(func)
    func = click.option("--avg-size", type=int, help="Average chunk size in bytes.")(func)
    func = click.option("--min-size", type=int, help="Minimum chunk size in bytes.")(func)
    return func


def make_chunker(
    key_file: Path | None,
    min_size: int | None,
    avg_size: int | None,
    max_size: int | None,
) -> tuple[ChunkHasher, ChunkingConfig]:
    """Resolve the hasher and chunk sizes for a command, exiting on bad input."""
    try:
        key = resolve_hash_key(key_file)
        config = get_chunking_config(min_size, avg_size, max_size)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if key is None:
        logger.info("No hash key configured, using unkeyed SHA-256 chunk hashes")
    return ChunkHasher(key), config


def chunk_payload(path: Path, hasher: ChunkHasher, config: ChunkingConfig) -> ChunkListing:
    """Build the listing of a payload file, exiting on failure."""
    try:
        return build_file_listing(path, hasher, config)
    except (OSError, ChunkListingError) as e:
        click.echo(f"Error: cannot chunk {path}: {e}", err=True)
        sys.exit(1)


def read_listing_file(path: Path) -> ChunkListing:
    """Load a listing file, exiting on failure."""
    try:
        return ChunkListing.read_from_wire(path.read_bytes())
    except (OSError, ChunkListingError) as e:
        click.echo(f"Error: cannot read listing {path}: {e}", err=True)
        sys.exit(1)


def diff_to_dict(diff: ChunkListingDiff) -> dict[str, Any]:
    """Convert a diff to JSON-serializable data with sorted hashes."""
    return {
        "unchanged": [h.hex() for h in diff.sorted_unchanged()],
        "added": [h.hex() for h in diff.sorted_added()],
        "removed": [h.hex() for h in diff.sorted_removed()],
        "bytes_added": diff.bytes_added,
        "bytes_removed": diff.bytes_removed,
    }


def echo_diff_summary(diff: ChunkListingDiff) -> None:
    """Print the counts and byte totals of a diff."""
    click.echo(f"Unchanged: {len(diff.unchanged)} chunks")
    click.echo(f"Added:     {len(diff.added)} chunks ({diff.bytes_added} bytes)")
    click.echo(f"Removed:   {len(diff.removed)} chunks ({diff.bytes_removed} bytes)")


@click.command()
@click.argument("payload", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the listing.",
)
@chunking_options
def build(
    payload: Path,
    output: Path,
    min_size: int | None,
    avg_size: int | None,
    max_size: int | None,
    key_file: Path | None,
) -> None:
    """Chunk PAYLOAD and write its listing."""
    hasher, config = make_chunker(key_file, min_size, avg_size, max_size)
    listing = chunk_payload(payload, hasher, config)

    try:
        output.write_bytes(listing.write_to_wire())
    except OSError as e:
        click.echo(f"Error: cannot write {output}: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {output}: {len(listing)} chunks, {listing.total_length} bytes")


@click.command()
@click.argument("listing_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def show(listing_file: Path, as_json: bool) -> None:
    """Print the chunks of LISTING_FILE in payload order."""
    listing = read_listing_file(listing_file)

    if as_json:
        click.echo(json.dumps({
            "chunk_count": listing.get_chunk_count(),
            "total_length": listing.total_length,
            "chunks": [
                {"index": i, "hash": e.hash.hex(), "start": e.start, "length": e.length}
                for i, e in enumerate(listing)
            ],
        }, indent=2))
        return

    click.echo(f"{listing.get_chunk_count()} chunks, {listing.total_length} bytes")
    for i, entry in enumerate(listing):
        click.echo(f"{i:>6}  {entry.start:>12}  {entry.length:>10}  {entry.hash.hex()}")


@click.command()
@click.argument("old", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def diff(old: Path, new: Path, as_json: bool) -> None:
    """Compare listing OLD against listing NEW."""
    result = ChunkListingDiff.compute(read_listing_file(old), read_listing_file(new))

    if as_json:
        click.echo(json.dumps(diff_to_dict(result), indent=2))
        return

    echo_diff_summary(result)
    for chunk_hash in result.sorted_added():
        click.echo(f"+ {chunk_hash.hex()}")
    for chunk_hash in result.sorted_removed():
        click.echo(f"- {chunk_hash.hex()}")
