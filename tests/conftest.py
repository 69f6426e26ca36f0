"""Pytest configuration and fixtures."""

import io
import json
import logging
import os
import subprocess

import pytest

from aaxconvert.config import AaxConvertConfig, CrackerConfig, ToolsConfig, reset_config
from aaxconvert.utils.container import CHECKSUM_OFFSET

SAMPLE_CHECKSUM = bytes(range(0xA0, 0xA0 + 20))


def command_exists(cmd: str) -> bool:
    """Check if a command exists in PATH."""
    try:
        subprocess.run(
            [cmd, "-version"],
            capture_output=True,
            timeout=5,
        )
        return True
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False


@pytest.fixture
def has_ffmpeg() -> bool:
    """Check if ffmpeg and ffprobe are available."""
    return command_exists("ffmpeg") and command_exists("ffprobe")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep user config files and AAXCONVERT_* variables out of tests."""
    import aaxconvert.config as config_module

    monkeypatch.setattr(config_module, "CONFIG_LOCATIONS", [])
    for key in list(os.environ):
        if key.startswith("AAXCONVERT_") or key == "RCRACK_PATH":
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()
    package_logger = logging.getLogger("aaxconvert")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def config(tmp_path) -> AaxConvertConfig:
    """Configuration pointing at a fake rcrack install in tmp_path."""
    rcrack = tmp_path / "tools" / "rcrack" / "linux" / "rcrack"
    return AaxConvertConfig(
        cracker=CrackerConfig(executable=str(rcrack), tables_dir=str(tmp_path / "tools" / "rcrack" / "tables")),
        tools=ToolsConfig(ffmpeg="ffmpeg", ffprobe="ffprobe"),
    )


@pytest.fixture
def sample_checksum() -> bytes:
    return SAMPLE_CHECKSUM


@pytest.fixture
def aax_file(tmp_path):
    """A file with a known checksum at the AAX checksum offset."""
    path = tmp_path / "book.aax"
    path.write_bytes(b"\x00" * CHECKSUM_OFFSET + SAMPLE_CHECKSUM + b"\x11" * 200)
    return path


def ffprobe_output(
    brand: str = "aax",
    artist: str = "Jane Doe",
    title: str = "My Book",
    date: str = "2017",
    duration: str = "7384.520000",
) -> str:
    """Build ffprobe ``-show_format`` JSON like ffprobe prints it."""
    return json.dumps(
        {
            "format": {
                "filename": "book.aax",
                "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
                "duration": duration,
                "tags": {
                    "major_brand": f" {brand} ",
                    "artist": f"{artist} ",
                    "title": title,
                    "date": date,
                },
            }
        }
    )


class FakeProcess:
    """Stand-in for subprocess.Popen with canned output."""

    def __init__(self, args, stdout="", stderr="", returncode=0, hang=False, on_timeout=None, cwd=None):
        self.args = list(args)
        self.cwd = cwd
        self.returncode = None
        self._final_returncode = returncode
        self._stdout = stdout
        self._stderr_text = stderr
        # Universal newlines, like Popen in text mode
        self.stderr = io.StringIO(stderr, newline=None)
        self.hang = hang
        self.on_timeout = on_timeout
        self.terminated = False
        self.killed = False

    def communicate(self, timeout=None):
        if self.hang and not self.terminated:
            if self.on_timeout is not None:
                self.on_timeout()
            raise subprocess.TimeoutExpired(self.args, timeout)
        self.returncode = self._final_returncode
        return self._stdout, self._stderr_text

    def wait(self, timeout=None):
        if self.returncode is None:
            self.returncode = self._final_returncode
        return self.returncode

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True
        self.returncode = -15

    def kill(self):
        self.killed = True
        self.returncode = -9


class FakePopen:
    """Records commands and answers them with a handler.

    The handler gets the argument list and returns a dict of FakeProcess
    keyword arguments (stdout, stderr, returncode, hang).
    """

    def __init__(self, handler=None):
        self.handler = handler or (lambda args: {})
        self.calls: list[list[str]] = []
        self.processes: list[FakeProcess] = []

    def __call__(self, args, cwd=None, **kwargs):
        args = list(args)
        self.calls.append(args)
        process = FakeProcess(args, cwd=cwd, **self.handler(args))
        self.processes.append(process)
        return process

    def commands(self, program: str) -> list[list[str]]:
        return [c for c in self.calls if c[0] == program]


@pytest.fixture
def fake_popen(monkeypatch):
    """Patch subprocess.Popen; set ``.handler`` to control the output."""
    fake = FakePopen()
    monkeypatch.setattr(subprocess, "Popen", fake)
    return fake


@pytest.fixture
def probe_json():
    """The ffprobe_output builder, for tests that need custom tags."""
    return ffprobe_output
