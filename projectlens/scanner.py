"""Bounded project file walking and content sampling."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from .languages import detect_language
from .logging import get_logger
from .models import TRUNCATION_MARKER, FileRecord

DEFAULT_MAX_FILE_BYTES = 50_000
DEFAULT_MAX_CONTENT_CHARS = 2000
DEFAULT_MAX_DEPTH = 32

_EXCLUDED_NAMES = (
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "vendor",
    ".venv",
    "venv",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    "dist",
    "build",
    "out",
    "target",
    "coverage",
    ".env",
    ".env.*",
    "*.log",
)

_BINARY_SUFFIXES = (
    "jpg",
    "jpeg",
    "png",
    "gif",
    "ico",
    "svg",
    "bmp",
    "webp",
    "woff",
    "woff2",
    "ttf",
    "eot",
    "otf",
    "pdf",
    "zip",
    "gz",
    "tar",
    "exe",
    "dll",
    "so",
    "dylib",
    "class",
    "jar",
    "pyc",
)


@dataclass(frozen=True)
class ExclusionRule:
    """A path pattern that prunes matching files and directories from a walk."""

    pattern: str
    directory_only: bool = False
    anchored: bool = False
    case_sensitive: bool = True

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path if self.case_sensitive else rel_path.lower()
        if self.anchored or "/" in self.pattern:
            return fnmatchcase(target, self.pattern)

        return any(fnmatchcase(part, self.pattern) for part in target.split("/"))


def build_rule(pattern: str) -> ExclusionRule | None:
    """Parse a gitignore-style pattern (``dir/`` and ``/anchored`` supported)."""
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return ExclusionRule(pattern=pattern, directory_only=directory_only, anchored=anchored)


def default_rules() -> List[ExclusionRule]:
    rules = [ExclusionRule(pattern=name, case_sensitive=False) for name in _EXCLUDED_NAMES]
    rules.extend(
        ExclusionRule(pattern=f"*.{suffix}", case_sensitive=False) for suffix in _BINARY_SUFFIXES
    )
    return rules


def load_rules(extra_patterns: Iterable[str] = ()) -> List[ExclusionRule]:
    """Return the default exclusion rules followed by configured extras."""
    rules = default_rules()
    for pattern in extra_patterns:
        rule = build_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def is_excluded(rel_path: str, is_dir: bool, rules: Sequence[ExclusionRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


def glob_matches(rel_path: str, pattern: str) -> bool:
    """Match a relative POSIX path against a glob pattern, segment by segment.

    ``*`` and ``?`` never cross a ``/``; a ``**`` segment spans zero or more
    directories.
    """
    return _match_segments(rel_path.split("/"), pattern.strip("/").split("/"))


def _match_segments(parts: Sequence[str], patterns: Sequence[str]) -> bool:
    if not patterns:
        return not parts
    head, rest = patterns[0], patterns[1:]
    if head == "**":
        return any(_match_segments(parts[index:], rest) for index in range(len(parts) + 1))
    return bool(parts) and fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def resolve_root(root: str | Path) -> Path:
    """Resolve a project root, raising when it is missing or not a directory."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")
    return root_path


def format_timestamp(epoch_seconds: float) -> str:
    """Render a modification time as an ISO-8601 UTC string with milliseconds."""
    stamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileScanner:
    """Walks a project tree to produce capped, truncated file records."""

    def __init__(
        self,
        *,
        exclude_paths: Iterable[str] = (),
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.rules = load_rules(exclude_paths)
        self.max_file_bytes = max_file_bytes
        self.max_content_chars = max_content_chars
        self.max_depth = max_depth
        self.logger = get_logger("scanner")

    def scan(self, root: str | Path, max_files: int = 100) -> List[FileRecord]:
        """Return at most ``max_files`` records for qualifying files under ``root``."""
        root_path = resolve_root(root)
        records: List[FileRecord] = []
        if max_files <= 0:
            return records

        for path, rel_path in self.iter_files(root_path):
            record = self._read_record(path, rel_path)
            if record is None:
                continue
            records.append(record)
            if len(records) >= max_files:
                break

        self.logger.debug("Scanned %d files under %s", len(records), root_path)
        return records

    def list_files(self, root: str | Path, pattern: str = "**/*", limit: int = 1000) -> List[str]:
        """Return sorted relative paths matching ``pattern``, honoring exclusions."""
        root_path = resolve_root(root)
        matches: List[str] = []
        for _, rel_path in self.iter_files(root_path):
            if glob_matches(rel_path, pattern):
                matches.append(rel_path)
                if len(matches) >= limit:
                    break
        return sorted(matches)

    def iter_files(self, root_path: Path) -> Iterator[Tuple[Path, str]]:
        """Yield ``(path, relative_path)`` for non-excluded files, depth-first."""
        stack: List[Tuple[Path, str, int]] = [(root_path, "", 0)]
        while stack:
            directory, rel_dir, depth = stack.pop()
            try:
                with os.scandir(directory) as iterator:
                    entries = sorted(iterator, key=lambda entry: entry.name)
            except OSError as exc:
                self.logger.warning("Skipping unreadable directory %s: %s", directory, exc)
                continue

            subdirectories: List[Tuple[Path, str, int]] = []
            for entry in entries:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = not is_dir and entry.is_file()
                except OSError as exc:
                    self.logger.warning("Skipping unreadable entry %s: %s", entry.path, exc)
                    continue

                if is_excluded(rel_path, is_dir, self.rules):
                    continue
                if is_dir:
                    if depth + 1 > self.max_depth:
                        self.logger.debug("Depth cap reached at %s", rel_path)
                        continue
                    subdirectories.append((Path(entry.path), rel_path, depth + 1))
                elif is_file:
                    yield Path(entry.path), rel_path

            # Reversed so the stack pops subdirectories in listing order.
            stack.extend(reversed(subdirectories))

    def _read_record(self, path: Path, rel_path: str) -> FileRecord | None:
        try:
            stat_result = path.stat()
        except OSError as exc:
            self.logger.warning("Could not stat %s: %s", path, exc)
            return None

        if stat_result.st_size >= self.max_file_bytes:
            self.logger.debug("Skipping %s (%d bytes)", rel_path, stat_result.st_size)
            return None

        try:
            content = path.read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            self.logger.warning("Could not read %s: %s", path, exc)
            return None

        truncated = len(content) > self.max_content_chars
        if truncated:
            content = content[: self.max_content_chars] + TRUNCATION_MARKER

        return FileRecord(
            path=rel_path,
            content=content,
            language=detect_language(path.name),
            size=stat_result.st_size,
            last_modified=format_timestamp(stat_result.st_mtime),
            truncated=truncated,
        )


__all__ = [
    "ExclusionRule",
    "FileScanner",
    "build_rule",
    "default_rules",
    "format_timestamp",
    "glob_matches",
    "is_excluded",
    "load_rules",
    "resolve_root",
]
