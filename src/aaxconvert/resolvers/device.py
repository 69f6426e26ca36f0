"""Activation bytes from the Windows device registry."""

import logging
from typing import ClassVar

from aaxconvert.errors import ResolutionError
from aaxconvert.models import ContainerMetadata
from aaxconvert.registry import DeviceRegistry
from aaxconvert.resolvers.base import BaseStrategy

logger = logging.getLogger(__name__)


class DeviceStrategy(BaseStrategy):
    """Pick a registered device's activation bytes.

    Without a device number the first registered device is used. A
    requested device number that is not registered is an error, not a
    reason to try the next source.
    """

    name: ClassVar[str] = "device-registry"
    priority: ClassVar[int] = 20

    def __init__(self, registry: DeviceRegistry, device: int | None = None) -> None:
        self.registry = registry
        self.device = device

    def resolve(self, metadata: ContainerMetadata | None) -> str | None:
        table = self.registry.read_table()

        if self.device is not None:
            secret = table.get(self.device)
            if secret is None:
                raise ResolutionError(
                    f"Device Nr. {self.device} not found! "
                    "Please use the 'list' command to get your devices."
                )
            logger.debug("Using activation bytes of device %d", self.device)
            return secret

        if table.is_empty:
            logger.debug("No registered devices found")
            return None
        return table.first()
