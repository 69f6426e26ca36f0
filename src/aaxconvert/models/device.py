"""Device activation table model."""

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, Field, field_validator

from .activation import extract_activation_bytes, is_sentinel


class DeviceActivationTable(BaseModel):
    """Activation bytes of registered devices, keyed by device index.

    The index is assigned by the registry source. Sentinel entries are
    dropped on construction, so every value in the table is usable.
    """

    entries: dict[int, str] = Field(default_factory=dict)

    @field_validator("entries", mode="after")
    @classmethod
    def drop_sentinels(cls, entries: dict[int, str]) -> dict[int, str]:
        """Remove unused device slots and order by device index."""
        return {index: entries[index] for index in sorted(entries) if not is_sentinel(entries[index])}

    @classmethod
    def from_raw(cls, values: Iterable[tuple[int, bytes]]) -> "DeviceActivationTable":
        """Build a table from ``(index, raw registry value)`` pairs.

        The first value seen for an index wins.
        """
        entries: dict[int, str] = {}
        for index, raw in values:
            entries.setdefault(index, extract_activation_bytes(raw))
        return cls(entries=entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def first(self) -> str | None:
        """Return the secret of the lowest device index, or None."""
        for secret in self.entries.values():
            return secret
        return None

    def get(self, index: int) -> str | None:
        return self.entries.get(index)

    def items(self) -> Iterator[tuple[int, str]]:
        """Iterate ``(device index, activation bytes)`` in index order."""
        return iter(self.entries.items())

    def __len__(self) -> int:
        return len(self.entries)
