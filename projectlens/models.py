"""Core data models shared across projectlens components."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

TRUNCATION_MARKER = "...[truncated]"

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"


class ErrorKind(str, Enum):
    """Categories of failures absorbed while collecting analysis fields."""

    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    PERMISSION_DENIED = "permission_denied"
    PARSE_ERROR = "parse_error"
    SUBPROCESS_ERROR = "subprocess_error"
    TIMEOUT = "timeout"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class CollectionError:
    """Why a component produced an empty value instead of real data."""

    kind: ErrorKind
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "CollectionError":
        return cls(kind=classify_exception(exc), message=str(exc) or type(exc).__name__)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Value produced by a component plus the failure that emptied it, if any."""

    value: T
    error: Optional[CollectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, value: T, exc: BaseException) -> "Result[T]":
        return cls(value=value, error=CollectionError.from_exception(exc))


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map a raised exception onto the closest ``ErrorKind``."""
    if isinstance(exc, subprocess.TimeoutExpired):
        return ErrorKind.TIMEOUT
    if isinstance(exc, subprocess.CalledProcessError):
        return ErrorKind.SUBPROCESS_ERROR
    if isinstance(exc, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, NotADirectoryError):
        return ErrorKind.NOT_A_DIRECTORY
    if isinstance(exc, PermissionError):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(exc, TimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(exc, (ValueError, RecursionError)):
        # Covers JSON, TOML and UTF-8 decoding failures, including over-deep nesting.
        return ErrorKind.PARSE_ERROR
    return ErrorKind.IO_ERROR


@dataclass(frozen=True)
class FileRecord:
    """Content sample and metadata for one scanned file."""

    path: str
    content: str
    language: str
    size: int
    last_modified: str
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "content": self.content,
            "language": self.language,
            "size": self.size,
            "lastModified": self.last_modified,
        }


@dataclass(frozen=True)
class Finding:
    """One heuristic static-analysis result tied to a file and line."""

    file: str
    line: int
    message: str
    severity: str
    kind: str
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "file": self.file,
            "line": self.line,
            "message": self.message,
            "severity": self.severity,
            "kind": self.kind,
        }
        if self.column is not None:
            payload["column"] = self.column
        return payload


@dataclass
class VCSInfo:
    """Read-only version-control metadata for a project root."""

    is_repository: bool = False
    branch: str = ""
    last_commit: str = ""
    status: str = ""
    remotes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isRepository": self.is_repository,
            "branch": self.branch,
            "lastCommit": self.last_commit,
            "status": self.status,
            "remotes": list(self.remotes),
        }


@dataclass(frozen=True)
class LargeFile:
    path: str
    size: int
    lines: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "size": self.size, "lines": self.lines}


@dataclass
class Metrics:
    """Size and complexity summary derived from one scan's file records."""

    total_files: int = 0
    total_lines: int = 0
    language_distribution: Dict[str, int] = field(default_factory=dict)
    largest_files: List[LargeFile] = field(default_factory=list)
    complexity: str = "low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "totalLines": self.total_lines,
            "languageDistribution": dict(self.language_distribution),
            "largestFiles": [item.to_dict() for item in self.largest_files],
            "complexity": self.complexity,
        }


__all__ = [
    "CollectionError",
    "ErrorKind",
    "FileRecord",
    "Finding",
    "LargeFile",
    "Metrics",
    "Result",
    "SEVERITY_ERROR",
    "SEVERITY_INFO",
    "SEVERITY_WARNING",
    "TRUNCATION_MARKER",
    "VCSInfo",
    "classify_exception",
]
