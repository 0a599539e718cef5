"""Logger hierarchy shared by the CLI, the scanners and the message server."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT_LOGGER = "projectlens"
_CONSOLE_FORMAT = "[projectlens] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("scanner")`` is ``projectlens.scanner``; no name gives the root."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}" if name else _ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route projectlens records to stderr and, when given, to ``log_file``.

    Safe to call repeatedly: handlers from an earlier call are replaced.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False

    for existing in list(root.handlers):
        root.removeHandler(existing)

    sinks: list[logging.Handler] = [logging.StreamHandler()]
    formats = [_CONSOLE_FORMAT]
    if log_file is not None:
        sinks.append(logging.FileHandler(log_file, encoding="utf-8"))
        formats.append(_FILE_FORMAT)

    for sink, fmt in zip(sinks, formats):
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(fmt))
        root.addHandler(sink)

    return root


__all__ = ["configure_logging", "get_logger"]
