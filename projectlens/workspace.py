"""Path resolution and single-file access, optionally confined to a root."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class WorkspaceError(RuntimeError):
    """Raised when a requested path resolves outside the configured workspace."""


class Workspace:
    """Resolves client-supplied paths.

    Without a root, relative paths resolve against the server's working
    directory and any path is accepted. With a root, relative paths resolve
    against it and anything escaping it is rejected.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = root.expanduser().resolve() if root is not None else None

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path).expanduser()
        if self.root is not None and not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if self.root is not None and not resolved.is_relative_to(self.root):
            raise WorkspaceError(f"Path outside workspace is not allowed: {path}")
        return resolved

    def write_file(self, path: str | Path, content: str) -> Path:
        target = self.resolve(path)
        target.write_text(content, encoding="utf-8")
        return target


__all__ = ["Workspace", "WorkspaceError"]
