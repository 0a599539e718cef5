"""Assembles one project analysis from the individual collectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict

from .analyzers import DependencyReader, ErrorDetector, MetricsAggregator
from .config import ServerConfig
from .git import GitInfoCollector
from .logging import get_logger
from .models import CollectionError, Metrics, Result, VCSInfo
from .scanner import FileScanner, resolve_root
from .structure import StructureBuilder


@dataclass
class AnalysisOutcome:
    """The wire payload plus the reasons any field came back empty."""

    analysis: Dict[str, Any]
    failures: Dict[str, CollectionError] = field(default_factory=dict)


class Orchestrator:
    """Runs the collectors selected by request flags for a project root."""

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        scanner: FileScanner | None = None,
        structure_builder: StructureBuilder | None = None,
        dependency_reader: DependencyReader | None = None,
        error_detector: ErrorDetector | None = None,
        git_collector: GitInfoCollector | None = None,
        metrics_aggregator: MetricsAggregator | None = None,
    ) -> None:
        self.config = config or ServerConfig()
        self.scanner = scanner or FileScanner(
            exclude_paths=self.config.exclude_paths,
            max_file_bytes=self.config.max_file_bytes,
            max_content_chars=self.config.max_content_chars,
            max_depth=self.config.max_scan_depth,
        )
        self.structure_builder = structure_builder or StructureBuilder(
            max_depth=self.config.structure_max_depth
        )
        self.dependency_reader = dependency_reader or DependencyReader()
        self.error_detector = error_detector or ErrorDetector(max_files=self.config.error_max_files)
        self.git_collector = git_collector or GitInfoCollector(timeout=self.config.vcs_timeout)
        self.metrics_aggregator = metrics_aggregator or MetricsAggregator()
        self.logger = get_logger("orchestrator")

    def analyze(
        self,
        path: str | Path,
        *,
        include_files: bool = False,
        include_dependencies: bool = False,
        include_errors: bool = False,
    ) -> AnalysisOutcome:
        """Analyze ``path``; raises only when the path itself is unusable."""
        root = resolve_root(path)
        self.logger.info("Analyzing project %s", root)

        results: Dict[str, Result[Any]] = {
            "files": Result.success([]),
            "structure": self._collect("structure", self._structure, root, {}),
            "errors": Result.success([]),
            "dependencies": Result.success({}),
            "gitInfo": self._collect("gitInfo", self._git_info, root, VCSInfo().to_dict()),
            "metrics": self._collect("metrics", self._metrics, root, Metrics().to_dict()),
        }
        failures: Dict[str, CollectionError] = {}

        if include_files:
            results["files"] = self._collect("files", self._files, root, [])
        if include_errors:
            results["errors"] = self._collect("errors", self._errors, root, [])
        if include_dependencies:
            manifests = self._collect("dependencies", self.dependency_reader.read_results, root, {})
            results["dependencies"] = Result(
                value={name: result.value for name, result in manifests.value.items()},
                error=manifests.error,
            )
            for name, result in manifests.value.items():
                if result.error is not None:
                    failures[f"dependencies.{name}"] = result.error

        for name, result in results.items():
            if result.error is not None:
                failures[name] = result.error

        analysis = {name: result.value for name, result in results.items()}
        if failures:
            self.logger.info("Analysis of %s degraded fields: %s", root, ", ".join(sorted(failures)))
        return AnalysisOutcome(analysis=analysis, failures=failures)

    # ------------------------------------------------------------------
    # Collectors

    def _collect(
        self,
        name: str,
        collector: Callable[[Path], Any],
        root: Path,
        empty: Any,
    ) -> Result[Any]:
        try:
            return Result.success(collector(root))
        except Exception as exc:
            self.logger.warning("Collecting %s for %s failed: %s", name, root, exc)
            return Result.failure(empty, exc)

    def _files(self, root: Path) -> list[Dict[str, Any]]:
        records = self.scanner.scan(root, self.config.max_files_per_scan)
        return [record.to_dict() for record in records]

    def _structure(self, root: Path) -> Dict[str, Any]:
        return {"root": self.structure_builder.build(root)}

    def _errors(self, root: Path) -> list[Dict[str, Any]]:
        records = self.scanner.scan(root, self.config.error_max_files)
        return [finding.to_dict() for finding in self.error_detector.detect(records)]

    def _git_info(self, root: Path) -> Dict[str, Any]:
        return self.git_collector.collect(root).to_dict()

    def _metrics(self, root: Path) -> Dict[str, Any]:
        records = self.scanner.scan(root, self.config.metrics_max_files)
        return self.metrics_aggregator.aggregate(records).to_dict()


__all__ = ["AnalysisOutcome", "Orchestrator"]
