"""Hash key command for chunkvault CLI.

Commands:
- keygen: Create the secret key used for keyed chunk hashes
"""

from __future__ import annotations

import sys

import click

from chunkvault.cli.config import get_key_file, save_hash_key
from chunkvault.core.hashing import generate_hash_key


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing key.")
def keygen(force: bool) -> None:
    """Create a secret key for chunk hashing.

    Listings built with different keys share no chunk hashes, so keep
    the same key for every backup of a payload.
    """
    key_file = get_key_file()
    if key_file.exists() and not force:
        click.echo(f"Error: hash key already exists at {key_file}", err=True)
        click.echo("Use --force to replace it (existing listings will no longer match).", err=True)
        sys.exit(1)

    save_hash_key(key_file, generate_hash_key())
    click.echo(f"Hash key written to {key_file}")
