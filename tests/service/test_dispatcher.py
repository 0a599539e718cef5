"""Tests for message routing and replies."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from projectlens.commands import CommandResult
from projectlens.config import ServerConfig
from projectlens.service.dispatcher import MessageDispatcher
from projectlens.workspace import Workspace
from tests._fixtures.project_builder import ProjectBuilder


class _StubRunner:
    def __init__(self, result: CommandResult) -> None:
        self.result = result
        self.calls: list[tuple[str, Path | None]] = []

    def run(self, command: str, working_directory: Path | None = None) -> CommandResult:
        self.calls.append((command, working_directory))
        return self.result


def _send(dispatcher: MessageDispatcher, message: object) -> dict:
    return dispatcher.dispatch(json.dumps(message))


@pytest.fixture
def dispatcher() -> MessageDispatcher:
    return MessageDispatcher(ServerConfig())


def test_dispatcher_lists_message_types(dispatcher: MessageDispatcher) -> None:
    assert set(dispatcher.message_types) == {
        "analyze_project",
        "get_file_content",
        "update_file",
        "run_command",
        "list_files",
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("not json", "Invalid JSON message"),
        ("[1, 2]", "Message must be a JSON object"),
        ('{"data": {}}', "Message is missing a 'type' field"),
        ('{"type": "reboot"}', "Unknown message type: reboot"),
    ],
)
def test_malformed_frames_yield_error_replies(
    dispatcher: MessageDispatcher, raw: str, expected: str
) -> None:
    response = dispatcher.dispatch(raw)

    assert response["type"] == "error"
    assert response["message"].startswith(expected)


def test_missing_required_field_is_reported(dispatcher: MessageDispatcher) -> None:
    response = _send(dispatcher, {"type": "get_file_content", "data": {}})

    assert response["type"] == "error"
    assert response["message"].startswith("Invalid payload for get_file_content:")
    assert "path" in response["message"]


def test_non_object_payload_is_rejected(dispatcher: MessageDispatcher) -> None:
    response = _send(dispatcher, {"type": "analyze_project", "data": "here"})

    assert response == {
        "type": "error",
        "message": "Invalid payload for analyze_project: data must be an object",
    }


def test_analyze_project_reply(dispatcher: MessageDispatcher, project: ProjectBuilder) -> None:
    project.write({"main.js": 'console.log("hi")\n'})

    response = _send(
        dispatcher,
        {
            "type": "analyze_project",
            "data": {"path": str(project.path()), "includeFiles": True, "includeErrors": True},
        },
    )

    assert response["type"] == "project_analysis"
    data = response["data"]
    assert [item["path"] for item in data["files"]] == ["main.js"]
    assert data["errors"][0]["kind"] == "code_smell"
    assert data["dependencies"] == {}


def test_analyze_missing_project_reports_error(dispatcher: MessageDispatcher, tmp_path: Path) -> None:
    response = _send(dispatcher, {"type": "analyze_project", "data": {"path": str(tmp_path / "nope")}})

    assert response["type"] == "error"
    assert response["message"].startswith("Error analyzing project:")


def test_get_file_content_returns_text_and_language(
    dispatcher: MessageDispatcher, project: ProjectBuilder
) -> None:
    project.write({"src/app.py": "print('hello')\n"})
    target = str(project.path() / "src" / "app.py")

    response = _send(dispatcher, {"type": "get_file_content", "data": {"path": target}})

    assert response == {
        "type": "file_content",
        "data": {"path": target, "content": "print('hello')\n", "language": "python"},
    }


def test_get_file_content_reports_missing_file(dispatcher: MessageDispatcher, tmp_path: Path) -> None:
    response = _send(dispatcher, {"type": "get_file_content", "data": {"path": str(tmp_path / "gone.txt")}})

    assert response["type"] == "error"
    assert response["message"].startswith("Error reading file:")


def test_update_file_overwrites_content(dispatcher: MessageDispatcher, project: ProjectBuilder) -> None:
    project.write({"notes.md": "old\n"})
    target = project.path() / "notes.md"

    response = _send(
        dispatcher, {"type": "update_file", "data": {"path": str(target), "content": "new\n"}}
    )

    assert response == {"type": "file_updated", "data": {"path": str(target), "success": True}}
    assert target.read_text(encoding="utf-8") == "new\n"


def test_update_file_does_not_create_directories(dispatcher: MessageDispatcher, tmp_path: Path) -> None:
    target = tmp_path / "missing" / "file.txt"

    response = _send(dispatcher, {"type": "update_file", "data": {"path": str(target), "content": "x"}})

    assert response["type"] == "error"
    assert response["message"].startswith("Error updating file:")
    assert not target.parent.exists()


def test_run_command_passes_through_result(tmp_path: Path) -> None:
    runner = _StubRunner(CommandResult(command="make", output="built\n", success=True))
    dispatcher = MessageDispatcher(ServerConfig(), command_runner=runner)

    response = _send(
        dispatcher,
        {"type": "run_command", "data": {"command": "make", "workingDirectory": str(tmp_path)}},
    )

    assert response == {
        "type": "command_result",
        "data": {"command": "make", "output": "built\n", "success": True},
    }
    assert runner.calls == [("make", tmp_path.resolve())]


def test_run_command_failure_is_a_result_not_an_error() -> None:
    runner = _StubRunner(CommandResult(command="false", output="", success=False, error="boom"))
    dispatcher = MessageDispatcher(ServerConfig(), command_runner=runner)

    response = _send(dispatcher, {"type": "run_command", "data": {"command": "false"}})

    assert response["type"] == "command_result"
    assert response["data"]["success"] is False
    assert response["data"]["error"] == "boom"
    assert runner.calls == [("false", None)]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")
def test_run_command_executes_real_shell(dispatcher: MessageDispatcher) -> None:
    response = _send(dispatcher, {"type": "run_command", "data": {"command": "echo hello"}})

    assert response["type"] == "command_result"
    assert response["data"]["output"] == "hello\n"
    assert response["data"]["success"] is True


def test_list_files_reply(dispatcher: MessageDispatcher, project: ProjectBuilder) -> None:
    project.write({"src/a.py": "", "src/b.js": "", "README.md": ""})

    response = _send(
        dispatcher,
        {"type": "list_files", "data": {"path": str(project.path()), "pattern": "**/*.py"}},
    )

    assert response["type"] == "file_list"
    assert response["data"]["files"] == ["src/a.py"]
    assert response["data"]["pattern"] == "**/*.py"


def test_request_id_is_echoed(dispatcher: MessageDispatcher) -> None:
    response = _send(dispatcher, {"type": "unknown", "id": 7})

    assert response["id"] == 7
    assert response["type"] == "error"


def test_workspace_confines_paths(project: ProjectBuilder, tmp_path: Path) -> None:
    project.write({"inside.txt": "ok\n"})
    outside = tmp_path / "outside.txt"
    outside.write_text("secret\n", encoding="utf-8")
    runner = _StubRunner(CommandResult(command="ls", output="", success=True))
    dispatcher = MessageDispatcher(
        ServerConfig(), command_runner=runner, workspace=Workspace(project.path())
    )

    inside = _send(dispatcher, {"type": "get_file_content", "data": {"path": "inside.txt"}})
    escaped = _send(dispatcher, {"type": "get_file_content", "data": {"path": str(outside)}})
    command = _send(
        dispatcher, {"type": "run_command", "data": {"command": "ls", "workingDirectory": ".."}}
    )
    default_cwd = _send(dispatcher, {"type": "run_command", "data": {"command": "ls"}})

    assert inside["data"]["content"] == "ok\n"
    assert escaped["type"] == "error"
    assert "outside workspace" in escaped["message"]
    assert command["type"] == "error"
    assert default_cwd["type"] == "command_result"
    assert runner.calls == [("ls", project.path().resolve())]


def test_analyze_with_deeply_nested_manifest_still_replies(
    dispatcher: MessageDispatcher, project: ProjectBuilder
) -> None:
    project.write_raw("package.json", "[" * 100_000 + "]" * 100_000)
    project.write({"requirements.txt": "requests\n"})

    response = _send(
        dispatcher,
        {
            "type": "analyze_project",
            "data": {"path": str(project.path()), "includeDependencies": True},
        },
    )

    assert response["type"] == "project_analysis"
    assert response["data"]["dependencies"]["requirements"] == ["requests"]
