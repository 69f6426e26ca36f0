"""Conversion result models."""

from pydantic import BaseModel, Field


class OutputPaths(BaseModel):
    """Files produced by one conversion."""

    audio: str
    cover: str
    video: str


class ConversionResult(BaseModel):
    """Outcome of converting one input file."""

    source: str
    outputs: OutputPaths | None = None
    activation_bytes: str | None = None
    stages_completed: list[str] = Field(default_factory=list)
    error: str | None = None
    error_type: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class BatchResult(BaseModel):
    """Outcome of a batch, in input order."""

    results: list[ConversionResult] = Field(default_factory=list)

    @property
    def converted(self) -> int:
        """Number of files fully converted."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> list[ConversionResult]:
        return [r for r in self.results if not r.success]

    def summary(self) -> str:
        """Return the final user-facing line for the batch."""
        total = self.converted
        if total == 0:
            return "No audiobooks were converted."
        if total == 1:
            return "Finished converting one audiobook!"
        return f"Finished converting {total} audiobooks!"
