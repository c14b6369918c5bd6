import sys

import pytest

from mysqlbackup.errors import BackupError
from mysqlbackup.services.command_runner import CommandNotFoundError, CommandRunner


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_command_runner_raises_with_stderr():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(BackupError, match="boom"):
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


def test_command_runner_merges_stderr_into_stdout():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import sys; print('out'); sys.stdout.flush(); sys.stderr.write('err')"],
        check=False,
        capture_output=True,
        merge_stderr=True,
    )

    assert "out" in result.stdout
    assert "err" in result.stdout


def test_command_runner_passes_extra_environment():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import os; print(os.environ['MYSQL_PWD'])"],
        capture_output=True,
        env={"MYSQL_PWD": "p@ss word"},
    )

    assert result.stdout.strip() == "p@ss word"


def test_command_runner_reports_missing_command():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(CommandNotFoundError, match="definitely-not-a-real-binary"):
        runner.run(["definitely-not-a-real-binary"], capture_output=True)


def test_command_runner_timeout_raises_error():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(BackupError, match="timed out"):
        runner.run(
            [sys.executable, "-c", "import time; time.sleep(2)"],
            check=True,
            capture_output=True,
            timeout=0.1,
        )
