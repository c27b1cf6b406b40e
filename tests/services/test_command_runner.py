import sys

import pytest

from updock.errors import RuntimeCommandError
from updock.services.command_runner import CommandRunner


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_command_runner_raises_with_stderr():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(RuntimeCommandError, match="boom"):
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(1)"],
            check=True,
            capture_output=True,
        )


def test_command_runner_returns_when_check_disabled():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.exit(1)"],
        check=False,
        capture_output=True,
    )

    assert result.returncode == 1


def test_command_runner_does_not_retry_failures(tmp_path, monkeypatch):
    runner = CommandRunner(logger=DummyLogger())
    monkeypatch.chdir(tmp_path)

    command = [
        sys.executable,
        "-c",
        (
            "from pathlib import Path;"
            "p=Path('attempts.txt');"
            "n=int(p.read_text()) if p.exists() else 0;"
            "p.write_text(str(n+1));"
            "import sys; sys.exit(1)"
        ),
    ]

    with pytest.raises(RuntimeCommandError):
        runner.run(command, check=True, capture_output=True)

    assert (tmp_path / "attempts.txt").read_text() == "1"


def test_command_runner_missing_binary_raises_error():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(RuntimeCommandError, match="Required command not found"):
        runner.run(["updock-command-that-does-not-exist"], capture_output=True)


def test_command_runner_runs_shell_strings():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run("echo hello && exit 0", shell=True, capture_output=True)

    assert result.stdout.strip() == "hello"


def test_command_runner_timeout_raises_error():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(RuntimeCommandError, match="timed out"):
        runner.run(
            [sys.executable, "-c", "import time; time.sleep(2)"],
            check=True,
            capture_output=True,
            timeout=0.1,
        )
