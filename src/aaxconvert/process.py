"""Subprocess lifecycle shared by all external tools.

Every ffprobe, ffmpeg and rcrack invocation goes through ManagedProcess,
which tracks an explicit state (STARTING -> RUNNING -> COMPLETED | FAILED |
CANCELLED) and handles cancellation the same way for all of them.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import threading
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from aaxconvert.errors import AaxConvertError, OperationCancelled, TranscodeError

logger = logging.getLogger(__name__)


class ProcessState(str, Enum):
    """Lifecycle state of a managed subprocess."""

    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_final(self) -> bool:
        return self in (ProcessState.COMPLETED, ProcessState.FAILED, ProcessState.CANCELLED)


class CancelToken:
    """Thread-safe cancellation flag passed to long-running operations."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "Operation") -> None:
        if self._event.is_set():
            raise OperationCancelled(f"{what} cancelled")


@dataclass
class ProcessResult:
    """Outcome of a finished subprocess."""

    args: list[str]
    state: ProcessState
    returncode: int | None
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.state == ProcessState.COMPLETED


class ManagedProcess:
    """Run one external command with explicit state and cancellation.

    Attributes:
        args: Command line
        name: Short name used in log and error messages
        state: Current ProcessState
    """

    # Seconds between cancellation checks while waiting
    poll_interval: float = 0.25
    # Seconds to wait after terminate() before kill()
    terminate_grace: float = 5.0

    def __init__(
        self,
        args: Sequence[str],
        name: str | None = None,
        cwd: str | None = None,
        cancel: CancelToken | None = None,
        error_cls: type[AaxConvertError] = TranscodeError,
    ) -> None:
        self.args = [str(a) for a in args]
        self.name = name or self.args[0]
        self.cwd = cwd
        self.cancel = cancel or CancelToken()
        self.error_cls = error_cls
        self.state = ProcessState.STARTING
        self._process: subprocess.Popen[str] | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, state={self.state.value})"

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def _set_state(self, state: ProcessState) -> None:
        logger.debug("%s: %s -> %s", self.name, self.state.value, state.value)
        self.state = state

    def _spawn(self, stdout: int) -> subprocess.Popen[str]:
        self.cancel.raise_if_cancelled(self.name)
        logger.debug("%s", self.command_line)
        try:
            process = subprocess.Popen(
                self.args,
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            self._set_state(ProcessState.FAILED)
            raise self.error_cls(f"Cannot start {self.name}: {e}") from e
        self._process = process
        self._set_state(ProcessState.RUNNING)
        return process

    def _terminate(self, process: subprocess.Popen[str]) -> None:
        process.terminate()
        try:
            process.wait(timeout=self.terminate_grace)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def _cancelled(self, process: subprocess.Popen[str]) -> OperationCancelled:
        self._terminate(process)
        self._set_state(ProcessState.CANCELLED)
        return OperationCancelled(f"{self.name} cancelled")

    def _finish(self, returncode: int | None, stdout: str, stderr: str) -> ProcessResult:
        self._set_state(ProcessState.COMPLETED if returncode == 0 else ProcessState.FAILED)
        return ProcessResult(
            args=self.args,
            state=self.state,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def _abort(self, process: subprocess.Popen[str], error: BaseException) -> None:
        """Stop the child when an exception escapes while it runs."""
        if self.state.is_final:
            return
        self._terminate(process)
        interrupted = isinstance(error, (KeyboardInterrupt, OperationCancelled))
        self._set_state(ProcessState.CANCELLED if interrupted else ProcessState.FAILED)

    def run(self) -> ProcessResult:
        """Run to completion, capturing stdout and stderr.

        Raises:
            OperationCancelled: If the cancel token fires while running
            error_cls: If the executable cannot be started
        """
        process = self._spawn(stdout=subprocess.PIPE)
        try:
            while True:
                try:
                    stdout, stderr = process.communicate(timeout=self.poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    if self.cancel.cancelled:
                        raise self._cancelled(process) from None
        except BaseException as e:
            self._abort(process, e)
            raise
        return self._finish(process.returncode, stdout or "", stderr or "")

    def stream(self, on_line: Callable[[str], None], tail: int = 20) -> ProcessResult:
        """Run to completion, feeding each stderr line to ``on_line``.

        ffmpeg separates stats updates with carriage returns; text mode
        treats those as line breaks too. Only the last ``tail`` lines are
        kept in the result for error reporting. An exception raised by
        ``on_line`` terminates the process and propagates.
        """
        process = self._spawn(stdout=subprocess.DEVNULL)
        last_lines: deque[str] = deque(maxlen=tail)
        assert process.stderr is not None
        try:
            for raw_line in process.stderr:
                if self.cancel.cancelled:
                    raise self._cancelled(process)
                line = raw_line.strip()
                if not line:
                    continue
                last_lines.append(line)
                on_line(line)
            process.wait()
        except BaseException as e:
            self._abort(process, e)
            raise
        if self.cancel.cancelled and process.returncode != 0:
            self._set_state(ProcessState.CANCELLED)
            raise OperationCancelled(f"{self.name} cancelled")
        return self._finish(process.returncode, "", "\n".join(last_lines))

    def check(self, result: ProcessResult) -> ProcessResult:
        """Raise error_cls for a failed result, return it otherwise."""
        if not result.ok:
            detail = result.stderr.strip().splitlines()[-1] if result.stderr.strip() else "no output"
            message = f"{self.name} failed (exit code {result.returncode}): {detail}"
            if issubclass(self.error_cls, TranscodeError):
                raise self.error_cls(message, returncode=result.returncode, stderr=result.stderr)
            raise self.error_cls(message)
        return result
