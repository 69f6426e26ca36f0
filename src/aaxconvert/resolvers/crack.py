"""Activation bytes from a rainbow-table lookup."""

from typing import ClassVar

from aaxconvert.cracker import RainbowCracker
from aaxconvert.models import ContainerMetadata
from aaxconvert.process import CancelToken
from aaxconvert.resolvers.base import BaseStrategy


class CrackStrategy(BaseStrategy):
    """Look up the file checksum with rcrack (only when asked to)."""

    name: ClassVar[str] = "rainbow-tables"
    priority: ClassVar[int] = 30

    def __init__(self, cracker: RainbowCracker, cancel: CancelToken | None = None) -> None:
        self.cracker = cracker
        self.cancel = cancel

    def resolve(self, metadata: ContainerMetadata | None) -> str | None:
        if metadata is None:
            return None
        return self.cracker.lookup(metadata.checksum, cancel=self.cancel)
