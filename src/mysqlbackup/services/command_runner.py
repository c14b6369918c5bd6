"""Subprocess execution service for MySQLBackup."""

import os
import subprocess
from typing import Dict, List, Optional

from mysqlbackup.errors import BackupError


class CommandNotFoundError(BackupError):
    """Raised when the executable of a command does not exist."""

    def __init__(self, command: str):
        super().__init__(f"Required command not found: {command}")
        self.command = command


class CommandRunner:
    """Runs external commands with consistent error handling.

    Commands are always executed from an argv list, never through a shell, so
    database names and credentials are passed verbatim.
    """

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
        merge_stderr: bool = False,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout
        child_env = None
        if env:
            child_env = os.environ.copy()
            child_env.update(env)

        kwargs = {}
        if capture_output:
            kwargs["stdout"] = subprocess.PIPE
            kwargs["stderr"] = subprocess.STDOUT if merge_stderr else subprocess.PIPE

        try:
            result = subprocess.run(
                cmd,
                text=True,
                errors="replace",
                timeout=effective_timeout,
                env=child_env,
                **kwargs,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(cmd[0]) from exc
        except subprocess.TimeoutExpired as exc:
            raise BackupError(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except OSError as exc:
            raise BackupError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0 or not check:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise BackupError(message)
