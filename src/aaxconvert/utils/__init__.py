"""Utility functions for aaxconvert."""

from .container import (
    CHECKSUM_LENGTH,
    CHECKSUM_OFFSET,
    checksum_hex,
    read_checksum,
)
from .naming import build_output_path, build_output_stem, sanitize_filename
from .timecode import parse_progress_line, timemark_to_percent, timemark_to_seconds

__all__ = [
    # Container parsing
    "read_checksum",
    "checksum_hex",
    "CHECKSUM_OFFSET",
    "CHECKSUM_LENGTH",
    # Naming
    "sanitize_filename",
    "build_output_stem",
    "build_output_path",
    # Progress
    "timemark_to_seconds",
    "timemark_to_percent",
    "parse_progress_line",
]
