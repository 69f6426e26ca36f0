"""Activation bytes resolution.

Sources are tried in this order, stopping at the first answer:

1. Explicit value (``-a``)
2. Windows device registry (``-d`` selects a device, default the first)
3. Rainbow-table lookup of the file checksum (``--crack``)
"""

from __future__ import annotations

import logging

from aaxconvert.config import AaxConvertConfig
from aaxconvert.cracker import RainbowCracker
from aaxconvert.errors import ResolutionError
from aaxconvert.models import Capabilities, ContainerMetadata, is_sentinel, normalize_activation_bytes
from aaxconvert.process import CancelToken
from aaxconvert.registry import DeviceRegistry

from .base import BaseStrategy
from .crack import CrackStrategy
from .device import DeviceStrategy
from .explicit import ExplicitStrategy

logger = logging.getLogger(__name__)


class ActivationResolver:
    """Evaluate activation bytes strategies in priority order."""

    def __init__(self, strategies: list[BaseStrategy], device_registry: bool = False) -> None:
        self.strategies = sorted(strategies, key=lambda s: s.priority)
        self.device_registry = device_registry

    def resolve(self, metadata: ContainerMetadata | None = None) -> str | None:
        """Return the first activation bytes found, or None."""
        for strategy in self.strategies:
            secret = strategy.resolve(metadata)
            if not secret or is_sentinel(secret):
                logger.debug("%s: no activation bytes", strategy.name)
                continue
            logger.debug("Activation bytes from %s", strategy.name)
            return normalize_activation_bytes(secret)
        return None

    def require(self, metadata: ContainerMetadata | None = None) -> str:
        """Like resolve(), but a missing value is an error.

        Raises:
            ResolutionError: If no source produced activation bytes
        """
        secret = self.resolve(metadata)
        if not secret:
            hint = "Please provide activation bytes with -a <bytes>"
            if self.device_registry:
                hint += ", select a device using -d <number>"
            hint += " or look them up with --crack"
            raise ResolutionError(f"No activation bytes available. {hint}")
        return secret


def build_resolver(
    config: AaxConvertConfig,
    capabilities: Capabilities,
    registry: DeviceRegistry | None = None,
    cracker: RainbowCracker | None = None,
    cancel: CancelToken | None = None,
) -> ActivationResolver:
    """Build the resolution chain for this configuration and platform.

    Raises:
        ValidationError: If the explicit activation bytes are malformed
        ResolutionError: If a device is requested without a device registry
    """
    activation = config.activation
    strategies: list[BaseStrategy] = []

    if activation.activation_bytes:
        strategies.append(ExplicitStrategy(activation.activation_bytes))

    if capabilities.device_registry:
        strategies.append(DeviceStrategy(registry or DeviceRegistry(), device=activation.device))
    elif activation.device is not None and not activation.activation_bytes:
        raise ResolutionError("Selecting a device requires the Audible device registry (Windows only)")

    if activation.crack:
        strategies.append(CrackStrategy(cracker or RainbowCracker.from_config(config.cracker), cancel))

    return ActivationResolver(strategies, device_registry=capabilities.device_registry)


__all__ = [
    "ActivationResolver",
    "BaseStrategy",
    "CrackStrategy",
    "DeviceStrategy",
    "ExplicitStrategy",
    "build_resolver",
]
