"""Depth-capped directory tree snapshot."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger
from .scanner import format_timestamp

_NOISE_DIRS = frozenset({".git", "node_modules", "dist", "build", ".vscode"})

DEFAULT_MAX_DEPTH = 3


class StructureBuilder:
    """Mirrors a directory tree into a nested ``name -> node`` mapping.

    Top-level entries sit at depth 1. A directory at ``max_depth`` is reported
    as ``{"type": "directory"}`` without a ``children`` key, so no chain of
    nested ``children`` is ever longer than ``max_depth``.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth
        self.logger = get_logger("structure")

    def build(self, root: str | Path, max_depth: int | None = None) -> Optional[Dict[str, Any]]:
        """Return the tree below ``root`` or ``None`` when it cannot be listed."""
        depth_cap = self.max_depth if max_depth is None else max_depth
        return self._build(Path(root), 0, depth_cap)

    def _build(self, directory: Path, depth: int, depth_cap: int) -> Optional[Dict[str, Any]]:
        if depth >= depth_cap:
            return None

        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            self.logger.debug("Cannot list %s: %s", directory, exc)
            return None

        result: Dict[str, Any] = {}
        for entry in entries:
            if entry.name in _NOISE_DIRS:
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                stat_result = entry.stat()
            except OSError as exc:
                self.logger.debug("Skipping %s: %s", entry.path, exc)
                continue

            if is_dir:
                children = self._build(Path(entry.path), depth + 1, depth_cap)
                node: Dict[str, Any] = {"type": "directory"}
                if children is not None:
                    node["children"] = children
                result[entry.name] = node
            else:
                result[entry.name] = {
                    "type": "file",
                    "size": stat_result.st_size,
                    "modified": format_timestamp(stat_result.st_mtime),
                }
        return result


__all__ = ["StructureBuilder"]
