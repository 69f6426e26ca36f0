"""Tests for the rainbow-table cracker adapter."""

import os

import pytest

from aaxconvert.config import CrackerConfig
from aaxconvert.cracker import RainbowCracker
from aaxconvert.errors import CrackError, OperationCancelled, ValidationError
from aaxconvert.process import CancelToken

CHECKSUM = "a0a1a2a3a4a5a6a7a8a9aaabacadaeafb0b1b2b3"

RCRACK_OUTPUT = """1 rainbow tables found
memory available: 4096 MB
searching for 1 hash...
plaintext of a0a1a2a3a4a5a6a7a8a9aaabacadaeafb0b1b2b3 is \\xda\\x00\\xeb\\x1c
statistics
-------------------------------------------------------
a0a1a2a3a4a5a6a7a8a9aaabacadaeafb0b1b2b3  \\xda\\x00\\xeb\\x1c  hex:1ceb00da
"""


@pytest.fixture
def cracker(tmp_path):
    tables = tmp_path / "rcrack" / "tables"
    return RainbowCracker(str(tmp_path / "rcrack" / "linux" / "rcrack"), str(tables))


def test_parse_output():
    assert RainbowCracker.parse_output(RCRACK_OUTPUT) == "1CEB00DA"


def test_parse_output_not_found():
    with pytest.raises(CrackError, match="not found"):
        RainbowCracker.parse_output("a0a1...  <not found>  hex:<not found>")


def test_lookup_success(cracker, fake_popen):
    fake_popen.handler = lambda args: {"stdout": RCRACK_OUTPUT}

    assert cracker.lookup(CHECKSUM.upper()) == "1CEB00DA"

    assert fake_popen.calls == [[cracker.executable, "tables", "-h", CHECKSUM]]
    assert fake_popen.processes[0].cwd == os.path.dirname(cracker.tables_dir)


def test_lookup_invalid_checksum(cracker, fake_popen):
    with pytest.raises(ValidationError):
        cracker.lookup("abc123")
    assert fake_popen.calls == []


def test_lookup_stderr_is_failure(cracker, fake_popen):
    fake_popen.handler = lambda args: {"stderr": "no rainbow table found\n", "returncode": 0}
    with pytest.raises(CrackError, match="no rainbow table found"):
        cracker.lookup(CHECKSUM)


def test_lookup_completed_without_answer(cracker, fake_popen):
    fake_popen.handler = lambda args: {"stdout": "1 rainbow tables found\nresult\n"}
    with pytest.raises(CrackError, match="not found"):
        cracker.lookup(CHECKSUM)


def test_lookup_no_output_and_failure(cracker, fake_popen):
    fake_popen.handler = lambda args: {"returncode": 1}
    with pytest.raises(CrackError):
        cracker.lookup(CHECKSUM)


def test_lookup_cancelled(cracker, fake_popen):
    token = CancelToken()
    fake_popen.handler = lambda args: {"hang": True, "on_timeout": token.cancel}

    with pytest.raises(OperationCancelled) as exc_info:
        cracker.lookup(CHECKSUM, cancel=token)

    assert not isinstance(exc_info.value, CrackError)
    assert fake_popen.processes[0].terminated


def test_from_config_default_tables(tmp_path):
    executable = tmp_path / "tools" / "rcrack" / "linux" / "rcrack"
    cracker = RainbowCracker.from_config(CrackerConfig(executable=str(executable)))
    assert cracker.tables_dir == str((tmp_path / "tools" / "rcrack" / "tables").resolve())
    assert cracker.working_dir == str((tmp_path / "tools" / "rcrack").resolve())


def test_is_available(cracker, tmp_path):
    assert cracker.is_available() is False

    os.makedirs(cracker.tables_dir)
    os.makedirs(os.path.dirname(cracker.executable))
    with open(cracker.executable, "w") as f:
        f.write("#!/bin/sh\n")
    os.chmod(cracker.executable, 0o755)
    assert cracker.is_available() is True
