"""Platform capability model."""

from pydantic import BaseModel


class Capabilities(BaseModel):
    """Optional capabilities of this machine, resolved once at startup."""

    device_registry: bool = False
    cracker: bool = False
    ffmpeg: bool = False
    ffprobe: bool = False
