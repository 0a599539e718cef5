"""Analyzers that derive dependencies, findings and metrics from a project."""

from __future__ import annotations

from .base import Detector
from .dependencies import DependencyReader
from .errors import ErrorDetector, JSONDetector, JavaScriptDetector, PythonDetector
from .metrics import MetricsAggregator

__all__ = [
    "DependencyReader",
    "Detector",
    "ErrorDetector",
    "JSONDetector",
    "JavaScriptDetector",
    "MetricsAggregator",
    "PythonDetector",
]
