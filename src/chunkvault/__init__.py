"""chunkvault - Chunk listings and diffs for encrypted, deduplicated backups."""

__version__ = "0.1.0"
