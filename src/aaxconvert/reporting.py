"""Live progress line on stdout.

All stages share one terminal line that is rewritten with carriage
returns. Files are converted one at a time, so there is only ever one
active line.
"""

from __future__ import annotations

import sys
from typing import TextIO

from aaxconvert.models import ProgressState


def format_size(size_bytes: int | float) -> str:
    """Convert bytes to human-readable string."""
    if size_bytes < 0:
        return "N/A"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} PB"


class ProgressReporter:
    """Write a single, continuously updated status line.

    Percentages never go backwards within one task, and ``finish``
    always ends the line so the next output starts on a fresh one.
    """

    def __init__(self, stream: TextIO | None = None, enabled: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.enabled = enabled
        self._label = ""
        self._percent = -1
        self._open = False

    def _write(self, text: str) -> None:
        if self.enabled:
            self.stream.write(text)
            self.stream.flush()

    def message(self, text: str) -> None:
        """Print a full line, closing any open status line first."""
        if self._open:
            self._write("\n")
            self._open = False
        self._write(f"{text}\n")

    def start(self, label: str) -> None:
        """Begin a new task."""
        if self._open:
            self._write("\n")
        self._label = label
        self._percent = -1
        self._open = True
        self._write(f"{label} ... \r")

    def update(self, state: ProgressState, detail: str = "") -> int | None:
        """Redraw the line for a new progress state.

        Returns:
            The percentage shown, or None when the total is unknown
        """
        percent = state.percent
        if percent is not None:
            percent = max(percent, self._percent)
            self._percent = percent
            text = f"{self._label} ... {percent}%"
        else:
            text = f"{self._label} ..."
        if detail:
            text += f" | {detail}"
        self._write(text + "\r")
        return percent

    def finish(self, complete: bool = True) -> None:
        """End the current line, showing 100% when the task completed."""
        if not self._open:
            return
        if complete:
            self._percent = 100
            self._write(f"{self._label} ... 100%\n")
        else:
            self._write("\n")
        self._open = False

    @property
    def percent(self) -> int:
        """Last percentage shown for the current task (-1 before any)."""
        return self._percent
