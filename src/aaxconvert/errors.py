"""Exception hierarchy for aaxconvert.

Every error raised on purpose by the package derives from AaxConvertError,
so callers can catch one type at the per-file boundary.
"""


class AaxConvertError(Exception):
    """Base class for all aaxconvert errors."""

    pass


class ValidationError(AaxConvertError):
    """Input is not what we expect (wrong container, bad license, bad bytes)."""

    pass


class ResolutionError(AaxConvertError):
    """No activation bytes could be resolved for a file."""

    pass


class CrackError(AaxConvertError):
    """The rainbow-table lookup failed or found nothing."""

    pass


class TransferError(AaxConvertError):
    """Error during an HTTP download."""

    pass


class TranscodeError(AaxConvertError):
    """An ffmpeg/ffprobe invocation failed."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class OperationCancelled(AaxConvertError):
    """A long-running subprocess or transfer was cancelled by the caller."""

    pass
