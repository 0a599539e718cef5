"""Line-oriented heuristic error detection.

These checks are naive: no AST, no scoping, plain substring
searches. False positives and negatives are expected.
"""

from __future__ import annotations

import json
import re
from typing import Iterable, Iterator, List, Sequence

from .base import Detector
from ..languages import JS_FAMILY
from ..logging import get_logger
from ..models import SEVERITY_ERROR, SEVERITY_INFO, SEVERITY_WARNING, FileRecord, Finding

DEFAULT_MAX_FILES = 50

_JS_DEBUG_CALL = "console.log"
_JS_DECLARATION = re.compile(r"^(\s*)(let|const|var)\s+(\w+)")
_JS_EMPTY_FUNCTION = re.compile(r"(\bfunction\b[^{]*|=>\s*)\{\s*\}")

_PY_IMPORT = re.compile(r"^import\s+(\w+)")
_PY_PRINT = re.compile(r"\bprint\(")


def _is_commented(line: str, marker: str, position: int) -> bool:
    """Return True when ``marker`` opens a comment before ``position``."""
    comment = line.find(marker)
    return comment != -1 and comment < position


def _appears_after(lines: Sequence[str], index: int, name: str) -> bool:
    return name in "\n".join(lines[index + 1 :])


class JavaScriptDetector(Detector):
    """Debug prints, unused declarations and empty functions in JS/TS."""

    languages = JS_FAMILY

    def check(self, record: FileRecord) -> Iterator[Finding]:
        lines = record.content.split("\n")
        for index, line in enumerate(lines):
            line_number = index + 1

            position = line.find(_JS_DEBUG_CALL)
            if position != -1 and not _is_commented(line, "//", position):
                yield Finding(
                    file=record.path,
                    line=line_number,
                    column=position + 1,
                    message="console.log detected - consider removing it before release",
                    severity=SEVERITY_WARNING,
                    kind="code_smell",
                )

            declaration = _JS_DECLARATION.match(line)
            if declaration:
                name = declaration.group(3)
                if not _appears_after(lines, index, name):
                    yield Finding(
                        file=record.path,
                        line=line_number,
                        column=declaration.start(2) + 1,
                        message=f"Variable '{name}' is declared but never used",
                        severity=SEVERITY_WARNING,
                        kind="unused_variable",
                    )

            if line.strip() == "function" or _JS_EMPTY_FUNCTION.search(line):
                yield Finding(
                    file=record.path,
                    line=line_number,
                    message="Empty function detected",
                    severity=SEVERITY_INFO,
                    kind="empty_function",
                )


class PythonDetector(Detector):
    """Unused module-level imports and stray print calls."""

    languages = frozenset({"python"})

    def check(self, record: FileRecord) -> Iterator[Finding]:
        lines = record.content.split("\n")
        for index, line in enumerate(lines):
            line_number = index + 1

            imported = _PY_IMPORT.match(line)
            if imported:
                name = imported.group(1)
                if not _appears_after(lines, index, name):
                    yield Finding(
                        file=record.path,
                        line=line_number,
                        column=1,
                        message=f"Import '{name}' is never used",
                        severity=SEVERITY_WARNING,
                        kind="unused_import",
                    )

            printed = _PY_PRINT.search(line)
            if printed and not _is_commented(line, "#", printed.start()):
                yield Finding(
                    file=record.path,
                    line=line_number,
                    column=printed.start() + 1,
                    message="print() detected - consider using logging",
                    severity=SEVERITY_INFO,
                    kind="code_smell",
                )


class JSONDetector(Detector):
    """Reports documents the json module refuses to parse.

    Truncated samples are skipped rather than parsed: cutting a document at
    the content limit always breaks it, so a finding there would only describe
    the sampling, not the file.
    """

    languages = frozenset({"json"})

    def supports(self, record: FileRecord) -> bool:
        # A truncated sample is never valid JSON.
        return super().supports(record) and not record.truncated

    def check(self, record: FileRecord) -> Iterable[Finding]:
        try:
            json.loads(record.content)
        except (ValueError, RecursionError) as exc:
            return [
                Finding(
                    file=record.path,
                    line=1,
                    message=f"Invalid JSON: {exc}",
                    severity=SEVERITY_ERROR,
                    kind="syntax_error",
                )
            ]
        return []


def default_detectors() -> List[Detector]:
    return [JavaScriptDetector(), PythonDetector(), JSONDetector()]


class ErrorDetector:
    """Runs registered detectors over the first ``max_files`` file records."""

    def __init__(
        self,
        detectors: Iterable[Detector] | None = None,
        max_files: int = DEFAULT_MAX_FILES,
    ) -> None:
        self.detectors = list(detectors) if detectors is not None else default_detectors()
        self.max_files = max_files
        self.logger = get_logger("errors")

    def detect(self, files: Sequence[FileRecord]) -> List[Finding]:
        findings: List[Finding] = []
        for record in list(files)[: self.max_files]:
            for detector in self.detectors:
                if not detector.supports(record):
                    continue
                try:
                    findings.extend(list(detector.check(record)))
                except Exception as exc:
                    self.logger.warning(
                        "%s failed on %s: %s", type(detector).__name__, record.path, exc
                    )
        return findings


__all__ = [
    "ErrorDetector",
    "JSONDetector",
    "JavaScriptDetector",
    "PythonDetector",
    "default_detectors",
]
