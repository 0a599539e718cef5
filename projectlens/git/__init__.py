"""Version-control helpers."""

from .info import GitInfoCollector

__all__ = ["GitInfoCollector"]
