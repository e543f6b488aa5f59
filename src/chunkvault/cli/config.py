"""Configuration utilities for chunkvault CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from chunkvault.core.config import ChunkingConfig
from chunkvault.core.hashing import HASH_KEY_SIZE

CONFIG_HOME_ENV = "CHUNKVAULT_HOME"
KEY_FILE_NAME = "hash.key"


def get_config_dir() -> Path:
    """Get the configuration directory for chunkvault.

    Returns:
        Path from $CHUNKVAULT_HOME, or ~/.chunkvault.
    """
    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".chunkvault"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_key_file() -> Path:
    """Get the path to the chunk hash key file."""
    return get_config_dir() / KEY_FILE_NAME


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def save_hash_key(path: Path, key: bytes) -> None:
    """Write a hash key as hex, readable only by the owner."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(key.hex() + "\n")
    path.chmod(0o600)


def load_hash_key(path: Path) -> bytes:
    """Read a hex-encoded hash key.

    Args:
        path: Key file written by save_hash_key().

    Returns:
        The 32-byte key.

    Raises:
        ValueError: If the file does not hold a valid key.
    """
    try:
        key = bytes.fromhex(path.read_text().strip())
    except ValueError as e:
        raise ValueError(f"Invalid hash key file {path}: not hex") from e
    if len(key) != HASH_KEY_SIZE:
        raise ValueError(f"Invalid hash key file {path}: expected {HASH_KEY_SIZE} bytes")
    return key


def resolve_hash_key(key_file: Path | None) -> bytes | None:
    """Find the hash key to use.

    Args:
        key_file: Explicit key file from the command line.

    Returns:
        Key from key_file, else from the configured key file,
        else None (unkeyed hashing).
    """
    if key_file is not None:
        return load_hash_key(key_file)
    default = get_key_file()
    if default.exists():
        return load_hash_key(default)
    return None


def get_chunking_config(
    min_size: int | None = None,
    avg_size: int | None = None,
    max_size: int | None = None,
) -> ChunkingConfig:
    """Build chunking parameters.

    Command-line values win over config.json, which wins over defaults.

    Raises:
        ValueError: If the resulting sizes are invalid.
    """
    config = load_config()
    defaults = ChunkingConfig()

    def pick(name: str, value: int | None) -> int:
        if value is not None:
            return value
        return int(config.get(name, getattr(defaults, name)))

    return ChunkingConfig(
        min_size=pick("min_size", min_size),
        avg_size=pick("avg_size", avg_size),
        max_size=pick("max_size", max_size),
    )
