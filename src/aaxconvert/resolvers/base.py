"""Base activation bytes strategy."""

from abc import ABC, abstractmethod
from typing import ClassVar

from aaxconvert.models import ContainerMetadata


class BaseStrategy(ABC):
    """Abstract base class for activation bytes sources.

    Strategies are evaluated in priority order by ActivationResolver.
    Each returns activation bytes, or None to let the next one try.

    Attributes:
        name: Human-readable name of the source
        priority: Lower numbers run first (default: 100)
    """

    name: ClassVar[str] = "base"
    priority: ClassVar[int] = 100

    @abstractmethod
    def resolve(self, metadata: ContainerMetadata | None) -> str | None:
        """Return activation bytes for the file, or None.

        Args:
            metadata: Metadata of the file being converted, if known

        Raises:
            AaxConvertError: If the source is definitely unusable
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority})"
