"""Rainbow-table cracker adapter.

Looks up the activation bytes of an AAX checksum with rcrack and the
tables published by the inAudible-NG project. A lookup can take a long
time; pass a CancelToken to be able to abort it.
"""

from __future__ import annotations

import logging
import os
import re
from typing import ClassVar

from aaxconvert.config import CrackerConfig
from aaxconvert.errors import CrackError, ValidationError
from aaxconvert.models import normalize_activation_bytes
from aaxconvert.process import CancelToken, ManagedProcess

logger = logging.getLogger(__name__)

CHECKSUM_PATTERN = re.compile(r"^[a-fA-F0-9]{40}$")
RESULT_PATTERN = re.compile(r"hex:([a-fA-F0-9]{8})")


class RainbowCracker:
    """Run ``rcrack <tables> -h <checksum>`` and parse the answer."""

    name: ClassVar[str] = "rcrack"

    def __init__(self, executable: str, tables_dir: str) -> None:
        self.executable = executable
        self.tables_dir = os.path.abspath(tables_dir)

    @classmethod
    def from_config(cls, config: CrackerConfig) -> RainbowCracker:
        return cls(config.executable, config.resolved_tables_dir)

    def is_available(self) -> bool:
        """Check if the executable and table directory exist."""
        return os.access(self.executable, os.X_OK) and os.path.isdir(self.tables_dir)

    @property
    def working_dir(self) -> str:
        return os.path.dirname(self.tables_dir)

    def build_command(self, checksum: str) -> list[str]:
        return [self.executable, os.path.basename(self.tables_dir), "-h", checksum]

    def lookup(self, checksum: str, cancel: CancelToken | None = None) -> str:
        """Find the activation bytes for a checksum.

        Args:
            checksum: 40 hex digits (20 bytes)
            cancel: Optional token to abort the search

        Returns:
            Uppercase activation bytes

        Raises:
            ValidationError: If the checksum is malformed
            CrackError: If rcrack fails or the tables hold no answer
            OperationCancelled: If cancelled while running
        """
        if not CHECKSUM_PATTERN.match(checksum):
            raise ValidationError(f"Invalid checksum {checksum!r} (expected 40 hex digits)")

        logger.info("Looking up activation bytes for checksum %s", checksum)
        process = ManagedProcess(
            self.build_command(checksum.lower()),
            name=self.name,
            cwd=self.working_dir,
            cancel=cancel,
            error_cls=CrackError,
        )
        result = process.run()

        # rcrack reports problems (missing tables etc.) on stderr
        if result.stderr.strip():
            raise CrackError(f"rcrack failed: {result.stderr.strip()}")
        if not result.stdout.strip():
            process.check(result)
            raise CrackError("rcrack produced no output")

        logger.info("%s", result.stdout.strip())
        return self.parse_output(result.stdout)

    @staticmethod
    def parse_output(output: str) -> str:
        """Extract ``hex:XXXXXXXX`` from rcrack output."""
        match = RESULT_PATTERN.search(output)
        if not match:
            raise CrackError("Activation bytes were not found!")
        return normalize_activation_bytes(match.group(1))
