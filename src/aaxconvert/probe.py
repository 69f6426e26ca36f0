"""FFprobe metadata probe.

Reads the container tags and duration with ffprobe and combines them with
the checksum into a ContainerMetadata record.
"""

import contextlib
import json
import logging
import math
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from typing import Any, ClassVar

from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.errors import TranscodeError, ValidationError
from aaxconvert.models import ContainerMetadata
from aaxconvert.process import CancelToken, ManagedProcess
from aaxconvert.utils.container import read_checksum

logger = logging.getLogger(__name__)


class FFprobe:
    """Run ffprobe and return its JSON format section.

    Only the ``format`` section is requested: AAX tags (major_brand,
    artist, title, date) and the duration all live there.
    """

    name: ClassVar[str] = "ffprobe"

    def __init__(self, executable: str = "ffprobe", cancel: CancelToken | None = None) -> None:
        self.executable = executable
        self.cancel = cancel

    @classmethod
    def is_available(cls, executable: str = "ffprobe") -> bool:
        """Check if ffprobe is available."""
        return shutil.which(executable) is not None

    def probe(self, path: str) -> dict[str, Any]:
        """Run ffprobe and return the parsed JSON output.

        Raises:
            TranscodeError: If ffprobe fails or prints invalid JSON
        """
        cmd = [
            self.executable,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            path,
        ]
        process = ManagedProcess(cmd, name=self.name, cancel=self.cancel)
        result = process.check(process.run())
        try:
            data: dict[str, Any] = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise TranscodeError(f"ffprobe returned invalid JSON for {path}: {e}") from e
        logger.debug("ffprobe format: %s", data.get("format"))
        return data


def _tag(tags: dict[str, Any], key: str) -> str:
    """Return a trimmed tag value, or an empty string."""
    value = tags.get(key)
    return str(value).strip() if value else ""


def build_metadata(probe_data: dict[str, Any], checksum: bytes) -> ContainerMetadata:
    """Merge ffprobe output and the raw checksum into ContainerMetadata."""
    fmt = probe_data.get("format", {})
    tags = fmt.get("tags", {})

    duration = 0
    if "duration" in fmt:
        with contextlib.suppress(ValueError, TypeError):
            duration = math.floor(float(fmt["duration"]))

    return ContainerMetadata(
        filetype=_tag(tags, "major_brand").lower(),
        artist=_tag(tags, "artist"),
        title=_tag(tags, "title"),
        release_date=_tag(tags, "date"),
        duration_seconds=duration,
        checksum=checksum.hex(),
    )


def fetch_metadata(
    path: str,
    config: AaxConvertConfig | None = None,
    cancel: CancelToken | None = None,
    validate: bool = True,
) -> ContainerMetadata:
    """Probe an AAX file and read its checksum.

    ffprobe and the checksum read are independent and run concurrently.

    Args:
        path: Path to the AAX file
        config: Configuration (default: global config)
        cancel: Optional cancel token for the ffprobe process
        validate: Reject files whose major brand is not ``aax``

    Returns:
        ContainerMetadata for the file

    Raises:
        FileNotFoundError: If the file does not exist
        TranscodeError: If ffprobe fails
        ValidationError: If the file is not an AAX container
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")

    config = config or get_config()
    ffprobe = FFprobe(config.tools.ffprobe, cancel=cancel)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="probe") as pool:
        probe_future = pool.submit(ffprobe.probe, path)
        checksum_future = pool.submit(read_checksum, path)
        probe_data = probe_future.result()
        checksum = checksum_future.result()

    metadata = build_metadata(probe_data, checksum)
    logger.info(
        "%s (Duration: %s)",
        metadata.display_name,
        metadata.duration_formatted,
    )

    if validate and not metadata.is_valid_container:
        raise ValidationError(f"Not a valid AAX file: {path} (major brand {metadata.filetype!r})")
    return metadata
