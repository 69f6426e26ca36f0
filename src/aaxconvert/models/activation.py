"""Activation bytes helpers.

Activation bytes are the 4-byte secret ffmpeg needs to decrypt an AAX file.
The canonical form used everywhere in aaxconvert is an 8 character uppercase
hex string such as ``1CEB00DA``.
"""

import re

from aaxconvert.errors import ValidationError

# Registry entries holding this value are unused device slots
SENTINEL = "FFFFFFFF"

ACTIVATION_BYTES_PATTERN = re.compile(r"^[A-Fa-f0-9]{8}$")


def bytes_to_hex(data: bytes) -> str:
    """Render bytes as uppercase hex, two digits per byte."""
    return data.hex().upper()


def is_sentinel(value: str) -> bool:
    """Check if a secret is the reserved all-ones marker."""
    return value.upper() == SENTINEL


def normalize_activation_bytes(value: str) -> str:
    """Validate and uppercase an activation bytes string.

    Args:
        value: 8 hex digits, any case

    Returns:
        Uppercase activation bytes

    Raises:
        ValidationError: If the value is not 8 hex digits or is the sentinel
    """
    value = value.strip()
    if not ACTIVATION_BYTES_PATTERN.match(value):
        raise ValidationError(f"Invalid activation bytes {value!r} (expected 8 hex digits, e.g. 1CEB00DA)")
    if is_sentinel(value):
        raise ValidationError(f"{SENTINEL} is not a usable activation secret")
    return value.upper()


def extract_activation_bytes(raw: bytes) -> str:
    """Extract activation bytes from a raw device registry value.

    The registry stores the secret little-endian in the first four bytes.

    Args:
        raw: Registry value, at least 4 bytes long

    Returns:
        Uppercase hex activation bytes
    """
    if len(raw) < 4:
        raise ValidationError(f"Registry value too short: {len(raw)} bytes")
    return bytes_to_hex(bytes(reversed(raw[:4])))


def activation_bytes_to_raw(value: str) -> bytes:
    """Inverse of extract_activation_bytes: back to the stored byte order."""
    return bytes(reversed(bytes.fromhex(value)))
