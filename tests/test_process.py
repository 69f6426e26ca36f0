"""Tests for the managed subprocess lifecycle."""

import subprocess

import pytest

from aaxconvert.errors import CrackError, OperationCancelled, TranscodeError
from aaxconvert.process import CancelToken, ManagedProcess, ProcessState


class TestRun:
    """Test ManagedProcess.run (captured output)."""

    def test_completed(self, fake_popen):
        fake_popen.handler = lambda args: {"stdout": "hello\n"}
        process = ManagedProcess(["tool", "--flag"], name="tool")
        assert process.state == ProcessState.STARTING

        result = process.run()

        assert result.ok
        assert result.stdout == "hello\n"
        assert process.state == ProcessState.COMPLETED
        assert fake_popen.calls == [["tool", "--flag"]]

    def test_failed_result_and_check(self, fake_popen):
        fake_popen.handler = lambda args: {"stderr": "first\nreally bad\n", "returncode": 2}
        process = ManagedProcess(["tool"])

        result = process.run()

        assert not result.ok
        assert process.state == ProcessState.FAILED
        with pytest.raises(TranscodeError, match=r"exit code 2\): really bad") as exc_info:
            process.check(result)
        assert exc_info.value.returncode == 2
        assert "first" in exc_info.value.stderr

    def test_spawn_failure_uses_error_class(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("no such file")

        monkeypatch.setattr(subprocess, "Popen", missing)
        process = ManagedProcess(["rcrack"], error_cls=CrackError)

        with pytest.raises(CrackError, match="Cannot start rcrack"):
            process.run()
        assert process.state == ProcessState.FAILED

    def test_cancel_while_running(self, fake_popen):
        token = CancelToken()
        fake_popen.handler = lambda args: {"hang": True, "on_timeout": token.cancel}
        process = ManagedProcess(["rcrack", "tables"], cancel=token)

        with pytest.raises(OperationCancelled):
            process.run()

        assert process.state == ProcessState.CANCELLED
        assert fake_popen.processes[0].terminated

    def test_cancel_before_start(self, fake_popen):
        token = CancelToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            ManagedProcess(["tool"], cancel=token).run()
        assert fake_popen.calls == []

    def test_cwd_is_passed(self, fake_popen, tmp_path):
        ManagedProcess(["tool"], cwd=str(tmp_path)).run()
        assert fake_popen.processes[0].cwd == str(tmp_path)


class TestStream:
    """Test ManagedProcess.stream (line callback)."""

    def test_lines_are_forwarded(self, fake_popen):
        fake_popen.handler = lambda args: {"stderr": "Input #0\n\nsize=1kB time=00:00:01.00\n"}
        lines = []

        result = ManagedProcess(["ffmpeg"]).stream(lines.append)

        assert lines == ["Input #0", "size=1kB time=00:00:01.00"]
        assert result.ok
        assert result.stderr.splitlines()[-1] == "size=1kB time=00:00:01.00"

    def test_tail_is_limited(self, fake_popen):
        fake_popen.handler = lambda args: {"stderr": "".join(f"line {i}\n" for i in range(50)), "returncode": 1}
        process = ManagedProcess(["ffmpeg"])

        result = process.stream(lambda line: None, tail=5)

        assert result.stderr.splitlines() == [f"line {i}" for i in range(45, 50)]
        assert process.state == ProcessState.FAILED

    def test_cancel_during_stream(self, fake_popen):
        token = CancelToken()
        fake_popen.handler = lambda args: {"stderr": "a\nb\nc\n"}
        seen = []

        def on_line(line):
            seen.append(line)
            token.cancel()

        process = ManagedProcess(["ffmpeg"], cancel=token)
        with pytest.raises(OperationCancelled):
            process.stream(on_line)

        assert seen == ["a"]
        assert process.state == ProcessState.CANCELLED


def test_process_state_is_final():
    assert not ProcessState.STARTING.is_final
    assert not ProcessState.RUNNING.is_final
    assert ProcessState.COMPLETED.is_final
    assert ProcessState.FAILED.is_final
    assert ProcessState.CANCELLED.is_final


def test_cancelled_is_not_a_crack_error():
    assert not issubclass(OperationCancelled, CrackError)


class TestInterrupt:
    """An exception escaping while the child runs stops the child."""

    def test_keyboard_interrupt_in_run(self, fake_popen):
        def interrupt():
            raise KeyboardInterrupt

        fake_popen.handler = lambda args: {"hang": True, "on_timeout": interrupt}
        process = ManagedProcess(["rcrack", "tables"])

        with pytest.raises(KeyboardInterrupt):
            process.run()

        assert fake_popen.processes[0].terminated
        assert process.state == ProcessState.CANCELLED

    def test_keyboard_interrupt_in_stream(self, fake_popen):
        fake_popen.handler = lambda args: {"stderr": "a\nb\n"}

        def on_line(line):
            raise KeyboardInterrupt

        process = ManagedProcess(["ffmpeg"])
        with pytest.raises(KeyboardInterrupt):
            process.stream(on_line)

        assert fake_popen.processes[0].terminated
        assert process.state == ProcessState.CANCELLED

    def test_callback_error_in_stream(self, fake_popen):
        fake_popen.handler = lambda args: {"stderr": "a\nb\n"}

        def on_line(line):
            raise ValueError("bad line")

        process = ManagedProcess(["ffmpeg"])
        with pytest.raises(ValueError, match="bad line"):
            process.stream(on_line)

        assert fake_popen.processes[0].terminated
        assert process.state == ProcessState.FAILED

    def test_finished_process_is_not_terminated(self, fake_popen):
        process = ManagedProcess(["tool"])
        process.run()
        assert not fake_popen.processes[0].terminated
