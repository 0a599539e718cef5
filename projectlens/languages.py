"""Filename to language tag classification."""

from __future__ import annotations

from pathlib import PurePath

DEFAULT_LANGUAGE = "text"

_LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".py": "python",
    ".pyi": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".json": "json",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".md": "markdown",
    ".sql": "sql",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".ps1": "powershell",
    ".dockerfile": "dockerfile",
    ".r": "r",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".dart": "dart",
}

_LANGUAGE_BY_FILENAME = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
    "rakefile": "ruby",
    "gemfile": "ruby",
}

JS_FAMILY = frozenset({"javascript", "javascriptreact", "typescript", "typescriptreact"})


def detect_language(filename: str) -> str:
    """Return the language tag for ``filename``, falling back to ``text``."""
    name = PurePath(filename).name.lower()
    if name in _LANGUAGE_BY_FILENAME:
        return _LANGUAGE_BY_FILENAME[name]
    suffix = PurePath(name).suffix
    return _LANGUAGE_BY_SUFFIX.get(suffix, DEFAULT_LANGUAGE)


__all__ = ["DEFAULT_LANGUAGE", "JS_FAMILY", "detect_language"]
