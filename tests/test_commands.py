"""Tests for the bounded command runner."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest

from projectlens.commands import CommandRunner

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")


def test_successful_command_returns_stdout() -> None:
    result = CommandRunner().run("echo hello")

    assert result.success is True
    assert result.output == "hello\n"
    assert result.error is None
    assert result.to_dict() == {"command": "echo hello", "output": "hello\n", "success": True}


def test_non_zero_exit_is_reported_not_raised() -> None:
    result = CommandRunner().run("echo partial; echo oops 1>&2; exit 3")

    assert result.success is False
    assert result.error == "oops"
    assert "partial" in result.output
    assert result.to_dict()["error"] == "oops"


def test_silent_failure_mentions_exit_status() -> None:
    result = CommandRunner().run("exit 4")

    assert result.success is False
    assert result.error == "Command exited with status 4"


def test_command_runs_in_working_directory(tmp_path: Path) -> None:
    result = CommandRunner().run("pwd", tmp_path)

    assert result.success is True
    assert Path(result.output.strip()).resolve() == tmp_path.resolve()


def test_missing_working_directory_fails_cleanly(tmp_path: Path) -> None:
    result = CommandRunner().run("echo hi", tmp_path / "missing")

    assert result.success is False
    assert result.error


def test_timeout_kills_the_process_group(tmp_path: Path) -> None:
    marker = tmp_path / "finished"
    runner = CommandRunner(timeout=0.3)

    started = time.monotonic()
    result = runner.run(f"sleep 1 && touch {marker}")
    elapsed = time.monotonic() - started

    assert result.success is False
    assert result.error is not None
    assert "timed out" in result.error
    assert elapsed < 1

    time.sleep(1.5)
    assert not marker.exists()
