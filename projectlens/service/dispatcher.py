"""Transport-independent request handling for the message channel."""

from __future__ import annotations

from typing import Any, Callable, Dict

from pydantic import ValidationError

from ..commands import CommandRunner
from ..config import ServerConfig
from ..languages import detect_language
from ..logging import get_logger
from ..orchestrator import Orchestrator
from ..workspace import Workspace, WorkspaceError
from .protocol import (
    AnalyzeProjectRequest,
    GetFileContentRequest,
    ListFilesRequest,
    ProtocolError,
    RunCommandRequest,
    UpdateFileRequest,
    decode_message,
    describe_validation_error,
    error_message,
    reply,
)

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]


class MessageDispatcher:
    """Decodes one frame, routes it by ``type`` and builds the reply.

    Every outcome is a reply mapping; nothing raised here should close the
    connection. A client-supplied top-level ``id`` is echoed on the reply.
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        orchestrator: Orchestrator | None = None,
        command_runner: CommandRunner | None = None,
        workspace: Workspace | None = None,
    ) -> None:
        self.config = config or ServerConfig()
        self.orchestrator = orchestrator or Orchestrator(self.config)
        self.command_runner = command_runner or CommandRunner(timeout=self.config.command_timeout)
        self.workspace = workspace or Workspace(self.config.workspace_root)
        self.logger = get_logger("service.dispatcher")
        self._handlers: Dict[str, Handler] = {
            "analyze_project": self._analyze_project,
            "get_file_content": self._get_file_content,
            "update_file": self._update_file,
            "run_command": self._run_command,
            "list_files": self._list_files,
        }

    @property
    def message_types(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, raw: str | bytes) -> Dict[str, Any]:
        request_id = None
        try:
            message = decode_message(raw)
            request_id = message.get("id")
            response = self.handle(message)
        except ProtocolError as exc:
            self.logger.debug("Rejected frame: %s", exc)
            response = error_message(str(exc))
        except Exception as exc:
            self.logger.exception("Unhandled error while processing message")
            response = error_message(f"Internal error: {exc}")

        if request_id is not None:
            response["id"] = request_id
        return response

    def handle(self, message: Dict[str, Any]) -> Dict[str, Any]:
        message_type = message.get("type")
        handler = self._handlers.get(message_type) if isinstance(message_type, str) else None
        if handler is None:
            return error_message(f"Unknown message type: {message_type}")

        data = message.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return error_message(f"Invalid payload for {message_type}: data must be an object")

        self.logger.debug("Handling %s", message_type)
        try:
            return handler(data)
        except ValidationError as exc:
            return error_message(
                f"Invalid payload for {message_type}: {describe_validation_error(exc)}"
            )

    # ------------------------------------------------------------------
    # Handlers

    def _analyze_project(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = AnalyzeProjectRequest.model_validate(data)
        try:
            root = self.workspace.resolve(request.path)
            outcome = self.orchestrator.analyze(
                root,
                include_files=request.include_files,
                include_dependencies=request.include_dependencies,
                include_errors=request.include_errors,
            )
        except (OSError, WorkspaceError) as exc:
            return error_message(f"Error analyzing project: {exc}")
        return reply("project_analysis", outcome.analysis)

    def _get_file_content(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = GetFileContentRequest.model_validate(data)
        try:
            target = self.workspace.resolve(request.path)
            content = target.read_text(encoding="utf-8")
        except (OSError, ValueError, WorkspaceError) as exc:
            return error_message(f"Error reading file: {exc}")
        return reply(
            "file_content",
            {"path": request.path, "content": content, "language": detect_language(target.name)},
        )

    def _update_file(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = UpdateFileRequest.model_validate(data)
        try:
            self.workspace.write_file(request.path, request.content)
        except (OSError, WorkspaceError) as exc:
            return error_message(f"Error updating file: {exc}")
        self.logger.info("Updated %s", request.path)
        return reply("file_updated", {"path": request.path, "success": True})

    def _run_command(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = RunCommandRequest.model_validate(data)
        try:
            if request.working_directory:
                cwd = self.workspace.resolve(request.working_directory)
            else:
                cwd = self.workspace.root
        except WorkspaceError as exc:
            return error_message(str(exc))
        result = self.command_runner.run(request.command, cwd)
        return reply("command_result", result.to_dict())

    def _list_files(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = ListFilesRequest.model_validate(data)
        try:
            root = self.workspace.resolve(request.path)
            files = self.orchestrator.scanner.list_files(
                root, request.pattern, limit=self.config.max_listed_files
            )
        except (OSError, WorkspaceError) as exc:
            return error_message(f"Error listing files: {exc}")
        return reply("file_list", {"path": request.path, "pattern": request.pattern, "files": files})


__all__ = ["MessageDispatcher"]
