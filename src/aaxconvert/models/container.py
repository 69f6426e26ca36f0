"""Container metadata model."""

from pydantic import BaseModel, ConfigDict

# Major brand tag of Audible AAX containers
EXPECTED_BRAND = "aax"


def format_duration(seconds: int) -> str:
    """Format seconds like ``2h3m4s``."""
    return f"{seconds // 3600}h{seconds % 3600 // 60}m{seconds % 60}s"


class ContainerMetadata(BaseModel):
    """Metadata of one input container.

    Combines ffprobe format tags with the checksum read from the file.
    Instances are immutable and live for a single conversion run.
    """

    filetype: str = ""
    artist: str = ""
    title: str = ""
    release_date: str = ""
    duration_seconds: int = 0
    checksum: str = "00" * 20

    model_config = ConfigDict(frozen=True)

    @property
    def is_valid_container(self) -> bool:
        """Check if the major brand is the one we can decrypt."""
        return self.filetype == EXPECTED_BRAND

    @property
    def duration_formatted(self) -> str:
        """Return duration as ``XhYmZs``."""
        return format_duration(self.duration_seconds)

    @property
    def display_name(self) -> str:
        """Return ``artist - title [date]``, the default output name."""
        return f"{self.artist} - {self.title} [{self.release_date}]"
