"""Container format parsing utilities."""

import logging
import os

logger = logging.getLogger(__name__)

# The AAX checksum lives at a fixed absolute position (0x28d)
CHECKSUM_OFFSET = 653
CHECKSUM_LENGTH = 20


def read_checksum(file_path: str) -> bytes:
    """Read the 20-byte checksum that identifies an AAX title.

    A file that cannot be opened or is too short yields 20 zero bytes.
    The error is logged, not raised: the major brand check later on
    rejects files that are not AAX.

    Args:
        file_path: Path to the AAX file

    Returns:
        Raw checksum bytes (always CHECKSUM_LENGTH long)
    """
    buffer = bytes(CHECKSUM_LENGTH)
    try:
        with open(file_path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            f.seek(CHECKSUM_OFFSET)
            data = f.read(CHECKSUM_LENGTH)
    except OSError as e:
        logger.error("Cannot read checksum from %s: %s", file_path, e)
        logger.debug("Checksum read failure", exc_info=True)
        return buffer

    if len(data) < CHECKSUM_LENGTH:
        logger.error(
            "Cannot read checksum from %s: file is only %d bytes",
            file_path,
            size,
        )
        return buffer
    return data


def checksum_hex(file_path: str) -> str:
    """Return the checksum of an AAX file as lowercase hex."""
    return read_checksum(file_path).hex()
