"""Project size and complexity metrics."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from ..models import FileRecord, LargeFile, Metrics

DEFAULT_MAX_FILES = 500
LARGE_FILE_BYTES = 1000
LARGEST_FILES_LIMIT = 10


def classify_complexity(total_files: int, total_lines: int) -> str:
    if total_files > 100 or total_lines > 10_000:
        return "high"
    if total_files > 50 or total_lines > 5000:
        return "medium"
    return "low"


class MetricsAggregator:
    """Summarizes a scan's file records.

    Line counts come from the retained content samples, so truncated files
    contribute only their first lines.
    """

    def aggregate(self, files: Sequence[FileRecord]) -> Metrics:
        counts: Counter[str] = Counter()
        large: List[LargeFile] = []
        total_lines = 0

        for record in files:
            lines = len(record.content.split("\n"))
            total_lines += lines
            counts[record.language] += 1
            if record.size > LARGE_FILE_BYTES:
                large.append(LargeFile(path=record.path, size=record.size, lines=lines))

        large.sort(key=lambda item: item.size, reverse=True)

        return Metrics(
            total_files=len(files),
            total_lines=total_lines,
            language_distribution=dict(counts),
            largest_files=large[:LARGEST_FILES_LIMIT],
            complexity=classify_complexity(len(files), total_lines),
        )


__all__ = ["MetricsAggregator", "classify_complexity"]
