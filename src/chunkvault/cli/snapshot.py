"""Snapshot commands for chunkvault CLI.

Commands:
- snapshot: Record a new backup version of a payload in a listing store
- versions: List the versions held by a listing store
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from chunkvault.cli.listing import (
    chunk_payload,
    chunking_options,
    diff_to_dict,
    echo_diff_summary,
    make_chunker,
)
from chunkvault.core.diff import ChunkListingDiff
from chunkvault.core.errors import ChunkListingError
from chunkvault.store import ListingStoreError, LocalFSListingStore

logger = logging.getLogger(__name__)

store_option = click.option(
    "--store",
    "store_dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding one listing per backup version.",
)


@click.command()
@click.argument("payload", type=click.Path(dir_okay=False, path_type=Path))
@store_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Show the diff without storing a new version.")
@chunking_options
def snapshot(
    payload: Path,
    store_dir: Path,
    as_json: bool,
    dry_run: bool,
    min_size: int | None,
    avg_size: int | None,
    max_size: int | None,
    key_file: Path | None,
) -> None:
    """Chunk PAYLOAD and store its listing as the next backup version.

    The new listing is compared with the latest stored version; the
    added chunks are the ones an uploader has to transmit.
    """
    hasher, config = make_chunker(key_file, min_size, avg_size, max_size)
    listing = chunk_payload(payload, hasher, config)

    try:
        store = LocalFSListingStore(store_dir)
        previous_version = store.latest_version()
        previous = store.latest()
    except (OSError, ChunkListingError) as e:
        click.echo(f"Error: cannot read store {store_dir}: {e}", err=True)
        sys.exit(1)

    result = ChunkListingDiff.compute(previous, listing)
    version = (previous_version or 0) + 1

    if dry_run:
        logger.info("Dry run, version %d not stored", version)
    elif previous_version is not None and previous == listing:
        logger.info("Payload unchanged since version %d, nothing stored", previous_version)
        version = previous_version
    else:
        try:
            store.put(version, listing)
        except ListingStoreError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if as_json:
        data = diff_to_dict(result)
        data["version"] = version
        data["previous_version"] = previous_version
        data["stored"] = not dry_run and version != previous_version
        click.echo(json.dumps(data, indent=2))
        return

    if previous_version is None:
        click.echo("No previous version, full upload required")
    else:
        click.echo(f"Compared with version {previous_version}")
    echo_diff_summary(result)
    if dry_run:
        click.echo(f"Dry run: version {version} not stored")
    elif version == previous_version:
        click.echo(f"Unchanged: still at version {version}")
    else:
        click.echo(f"Stored version {version} ({len(listing)} chunks)")


@click.command()
@store_option
def versions(store_dir: Path) -> None:
    """List the backup versions in a listing store."""
    if not store_dir.exists():
        click.echo("No versions stored")
        return

    try:
        store = LocalFSListingStore(store_dir)
        found = store.versions()
    except OSError as e:
        click.echo(f"Error: cannot read store {store_dir}: {e}", err=True)
        sys.exit(1)

    if not found:
        click.echo("No versions stored")
        return

    for version in found:
        try:
            listing = store.get(version)
        except ChunkListingError as e:
            click.echo(f"{version:>6}  unreadable: {e}")
            continue
        click.echo(f"{version:>6}  {len(listing):>8} chunks  {listing.total_length:>12} bytes")
