"""Activation bytes given by the user."""

from typing import ClassVar

from aaxconvert.models import ContainerMetadata, normalize_activation_bytes
from aaxconvert.resolvers.base import BaseStrategy


class ExplicitStrategy(BaseStrategy):
    """Use the value passed with ``-a``; it always wins."""

    name: ClassVar[str] = "explicit"
    priority: ClassVar[int] = 10

    def __init__(self, activation_bytes: str) -> None:
        self.activation_bytes = normalize_activation_bytes(activation_bytes)

    def resolve(self, metadata: ContainerMetadata | None) -> str | None:
        return self.activation_bytes
