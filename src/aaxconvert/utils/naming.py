"""Output file naming."""

import os
import re

# Characters not allowed in file names on common filesystems
_INVALID_CHARS = re.compile(r'[/\\?<>:*|"\x00-\x1f\x80-\x9f]')
_RESERVED_NAMES = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_MAX_LENGTH = 255


def sanitize_filename(name: str, replacement: str = "") -> str:
    """Make a string safe to use as a file name.

    Strips path separators and control characters, trailing dots and
    spaces, and Windows reserved device names. The result is at most
    255 bytes of UTF-8.
    """
    name = _INVALID_CHARS.sub(replacement, name)
    if name in (".", ".."):
        name = replacement
    if _RESERVED_NAMES.match(name):
        name = replacement
    name = name.rstrip(". ")
    encoded = name.encode("utf-8")[:_MAX_LENGTH]
    return encoded.decode("utf-8", errors="ignore")


def build_output_stem(display_name: str, override: str | None = None) -> str:
    """Pick the output file stem.

    Args:
        display_name: ``artist - title [date]`` of the input
        override: Explicit output file name; its extension is dropped

    Returns:
        Sanitized stem without extension
    """
    if override:
        stem = os.path.splitext(os.path.basename(override))[0]
        return sanitize_filename(stem)
    return sanitize_filename(display_name)


def build_output_path(directory: str, stem: str, extension: str) -> str:
    """Join directory, stem and extension (``.m4a`` etc.)."""
    return os.path.join(directory, f"{stem}{extension}")
