"""Device registry source (Windows only).

The Audible desktop software stores the activation bytes of every
registered device under HKLM. Each value holds the secret little-endian in
its first four bytes; unused slots hold FFFFFFFF.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

from aaxconvert.errors import ResolutionError
from aaxconvert.models import DeviceActivationTable

logger = logging.getLogger(__name__)

AUDIBLE_DEVICES_KEY = r"SOFTWARE\WOW6432Node\Audible\SWGIDMAP"

RawValues = list[tuple[int, bytes]]


def is_available() -> bool:
    """Check if the Windows registry can be read on this platform."""
    if sys.platform != "win32":
        return False
    try:
        import winreg  # noqa: F401
    except ImportError:
        return False
    return True


def read_registry_values(key_path: str = AUDIBLE_DEVICES_KEY) -> RawValues:
    """Read the raw device values from the registry.

    Value names are device numbers; when a name is not numeric the
    enumeration index is used instead. If two values map to the same
    device number, the first one is kept.

    Raises:
        ResolutionError: If the key cannot be opened
    """
    import winreg

    try:
        key = winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path)
    except OSError as e:
        raise ResolutionError(f"Cannot open registry key HKLM\\{key_path}: {e}") from e

    values: RawValues = []
    seen: set[int] = set()
    with key:
        index = 0
        while True:
            try:
                name, data, _kind = winreg.EnumValue(key, index)
            except OSError:
                break
            if isinstance(data, bytes) and len(data) >= 4:
                device = int(name) if str(name).isdigit() else index
                if device in seen:
                    logger.debug("Ignoring registry value %r, device %d already read", name, device)
                else:
                    seen.add(device)
                    values.append((device, data))
            else:
                logger.debug("Skipping registry value %r", name)
            index += 1
    return values


class DeviceRegistry:
    """Snapshot reader for the device activation table."""

    def __init__(self, reader: Callable[[], RawValues] = read_registry_values) -> None:
        self._reader = reader

    def read_table(self) -> DeviceActivationTable:
        """Read a fresh table; sentinel entries are already dropped."""
        table = DeviceActivationTable.from_raw(self._reader())
        logger.debug("Found %d registered device(s)", len(table))
        return table

    def list_devices(self) -> DeviceActivationTable:
        """Like read_table, but an empty table is an error."""
        table = self.read_table()
        if table.is_empty:
            raise ResolutionError("Could not find any Audible activation bytes!")
        return table
