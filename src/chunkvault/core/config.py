"""Shared configuration classes for chunkvault.

This module defines configuration classes used by the chunker and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

# Chunk size defaults (in bytes)
MIN_CHUNK_SIZE = 1 * 1024 * 1024   # 1 MB
AVG_CHUNK_SIZE = 4 * 1024 * 1024   # 4 MB
MAX_CHUNK_SIZE = 8 * 1024 * 1024   # 8 MB

# Bounds accepted by the FastCDC implementation
FASTCDC_MIN_BOUNDS = (64, 67_108_864)
FASTCDC_AVG_BOUNDS = (256, 268_435_456)
FASTCDC_MAX_BOUNDS = (1024, 1_073_741_824)


@dataclass(frozen=True)
class ChunkingConfig:
    """Chunk size parameters for content-defined chunking.

    Attributes:
        min_size: Smallest chunk emitted (except the last one).
        avg_size: Target average chunk size.
        max_size: Largest chunk emitted.
    """

    min_size: int = MIN_CHUNK_SIZE
    avg_size: int = AVG_CHUNK_SIZE
    max_size: int = MAX_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate sizes against each other and the FastCDC bounds."""
        _check_bounds("min_size", self.min_size, FASTCDC_MIN_BOUNDS)
        _check_bounds("avg_size", self.avg_size, FASTCDC_AVG_BOUNDS)
        _check_bounds("max_size", self.max_size, FASTCDC_MAX_BOUNDS)
        if not self.min_size <= self.avg_size <= self.max_size:
            raise ValueError(
                f"Chunk sizes must satisfy min <= avg <= max, got "
                f"{self.min_size}/{self.avg_size}/{self.max_size}"
            )

    @property
    def is_default(self) -> bool:
        """Check if all sizes are the defaults.

        Returns:
            True if no size was overridden.
        """
        return self == ChunkingConfig()


def _check_bounds(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
