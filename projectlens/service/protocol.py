"""Message shapes for the WebSocket channel."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ProtocolError(ValueError):
    """Raised when a frame is not a JSON object with a usable ``type``."""


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeProjectRequest(_Request):
    path: str
    include_files: bool = Field(default=False, alias="includeFiles")
    include_dependencies: bool = Field(default=False, alias="includeDependencies")
    include_errors: bool = Field(default=False, alias="includeErrors")


class GetFileContentRequest(_Request):
    path: str


class UpdateFileRequest(_Request):
    path: str
    content: str


class RunCommandRequest(_Request):
    command: str
    working_directory: Optional[str] = Field(default=None, alias="workingDirectory")


class ListFilesRequest(_Request):
    path: str
    pattern: str = "**/*"


class HealthResponse(BaseModel):
    status: str


def decode_message(raw: str | bytes) -> Dict[str, Any]:
    """Parse one frame into a message mapping."""
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"Invalid JSON message: {exc}") from exc
    if not isinstance(message, dict):
        raise ProtocolError("Message must be a JSON object")
    if "type" not in message:
        raise ProtocolError("Message is missing a 'type' field")
    return message


def reply(message_type: str, data: Any) -> Dict[str, Any]:
    return {"type": message_type, "data": data}


def error_message(message: str) -> Dict[str, Any]:
    return {"type": "error", "message": message}


def describe_validation_error(exc: ValidationError) -> str:
    """Condense pydantic errors into ``field: reason`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "data"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


__all__ = [
    "AnalyzeProjectRequest",
    "GetFileContentRequest",
    "HealthResponse",
    "ListFilesRequest",
    "ProtocolError",
    "RunCommandRequest",
    "UpdateFileRequest",
    "decode_message",
    "describe_validation_error",
    "error_message",
    "reply",
]
