"""Progress state model."""

import math

from pydantic import BaseModel


class ProgressState(BaseModel):
    """Snapshot of a running operation.

    ``current`` and ``total`` are seconds for transcoding stages and bytes
    for downloads. ``total`` is None when the size is unknown.
    """

    current: float = 0
    total: float | None = None

    @property
    def percent(self) -> int | None:
        """Return floor percentage clamped to 0..100, or None if unknown."""
        if not self.total or self.total <= 0:
            return None
        value = math.floor(self.current * 100 / self.total)
        return max(0, min(100, value))
