"""Timecode parsing for ffmpeg progress output."""

import math
import re

# ffmpeg stats line, e.g. "size=  1024kB time=01:02:03.45 bitrate= 64.0kbits/s"
TIME_PATTERN = re.compile(r"time=\s*(-?[\d:.]+)")


def timemark_to_seconds(timemark: str) -> int:
    """Convert ``H:MM:SS[.ff]`` into whole seconds.

    Fractions of a second are dropped. Fewer fields are read from the
    right, so ``MM:SS`` and ``SS`` also work.
    """
    parts = timemark.strip().split(":")
    if not parts or len(parts) > 3:
        raise ValueError(f"Invalid timemark: {timemark!r}")
    seconds = math.floor(float(parts[-1]))
    minutes = int(parts[-2]) if len(parts) >= 2 else 0
    hours = int(parts[-3]) if len(parts) == 3 else 0
    return hours * 3600 + minutes * 60 + seconds


def timemark_to_percent(timemark: str, total_seconds: int) -> int:
    """Convert a timemark into ``floor(elapsed * 100 / total)``."""
    if total_seconds <= 0:
        return 0
    return math.floor(timemark_to_seconds(timemark) * 100 / total_seconds)


def parse_progress_line(line: str) -> str | None:
    """Return the timemark of an ffmpeg stats line, or None."""
    match = TIME_PATTERN.search(line)
    if not match or match.group(1).startswith("-"):
        return None
    return match.group(1)
