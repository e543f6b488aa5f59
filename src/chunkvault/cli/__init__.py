"""Command-line interface for chunkvault.

This module provides the main CLI entry point and assembles all commands.

Commands:
- keygen: Create the chunk hash key
- build: Chunk a file and write its listing
- show: Print a listing
- diff: Compare two listings
- snapshot: Store a new backup version and report what changed
- versions: List stored backup versions
"""

from __future__ import annotations

import logging
import sys

import click

from chunkvault.cli.config import (
    get_config_dir,
    get_config_file,
    get_key_file,
    load_config,
    save_config,
)
from chunkvault.cli.keys import keygen
from chunkvault.cli.listing import build, diff, show
from chunkvault.cli.snapshot import snapshot, versions

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure the chunkvault logger to write to stderr.

    Args:
        verbose: Log DEBUG messages instead of WARNING and above.
    """
    root_logger = logging.getLogger("chunkvault")
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


@click.group()
@click.version_option(package_name="chunkvault")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """chunkvault - Chunk listings for encrypted, deduplicated backups."""
    setup_logging(verbose)


# Key command
cli.add_command(keygen)

# Listing commands
cli.add_command(build)
cli.add_command(show)
cli.add_command(diff)

# Store commands
cli.add_command(snapshot)
cli.add_command(versions)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "setup_logging",
    "get_config_dir",
    "get_config_file",
    "get_key_file",
    "load_config",
    "save_config",
]
