"""Base classes for per-language error detectors."""

from abc import ABC, abstractmethod
from typing import Iterable

from ..models import FileRecord, Finding


class Detector(ABC):
    """Contract for detectors that emit findings from one file's content sample."""

    languages: frozenset[str] = frozenset()

    def supports(self, record: FileRecord) -> bool:
        """Return True when this detector should run for the file."""
        return record.language in self.languages

    @abstractmethod
    def check(self, record: FileRecord) -> Iterable[Finding]:
        """Produce heuristic findings in line order."""
