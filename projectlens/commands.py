"""Bounded shell command execution."""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one shell command; failures are data, not exceptions."""

    command: str
    output: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "command": self.command,
            "output": self.output,
            "success": self.success,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


class CommandRunner:
    """Runs a shell command with a wall-clock limit.

    The command gets its own process group so a timeout terminates the shell
    and everything it spawned.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self.logger = get_logger("commands")

    def run(self, command: str, working_directory: str | Path | None = None) -> CommandResult:
        cwd = Path(working_directory).expanduser() if working_directory else Path.cwd()
        self.logger.info("Running command in %s: %s", cwd, command)

        try:
            process = subprocess.Popen(
                command,
                shell=True,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                start_new_session=True,
            )
        except OSError as exc:
            return CommandResult(command=command, output=str(exc), success=False, error=str(exc))

        try:
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            _terminate(process)
            stdout, stderr = process.communicate()
            message = f"Command timed out after {self.timeout:g} seconds"
            self.logger.warning("%s: %s", message, command)
            return CommandResult(
                command=command,
                output=_join_output(stdout, stderr),
                success=False,
                error=message,
            )

        if process.returncode != 0:
            message = stderr.strip() or f"Command exited with status {process.returncode}"
            return CommandResult(
                command=command,
                output=_join_output(stdout, stderr),
                success=False,
                error=message,
            )

        return CommandResult(command=command, output=stdout, success=True)


def _terminate(process: subprocess.Popen) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
    process.kill()


def _join_output(stdout: str | None, stderr: str | None) -> str:
    return "".join(part for part in (stdout, stderr) if part)


__all__ = ["CommandResult", "CommandRunner"]
