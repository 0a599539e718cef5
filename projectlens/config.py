"""Configuration loading for projectlens (.projectlens.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".projectlens.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class ServerConfig:
    """Server and scan limits, loaded once at process start."""

    host: str = "127.0.0.1"
    port: int = 3000
    max_files_per_scan: int = 100
    metrics_max_files: int = 500
    error_max_files: int = 50
    max_file_bytes: int = 50_000
    max_content_chars: int = 2000
    max_scan_depth: int = 32
    structure_max_depth: int = 3
    command_timeout_ms: int = 30_000
    vcs_timeout_ms: int = 5000
    max_listed_files: int = 1000
    exclude_paths: List[str] = field(default_factory=list)
    workspace_root: Optional[Path] = None
    log_file: Optional[Path] = None

    @property
    def command_timeout(self) -> float:
        return self.command_timeout_ms / 1000

    @property
    def vcs_timeout(self) -> float:
        return self.vcs_timeout_ms / 1000

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with the non-``None`` overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


_INT_FIELDS = (
    "port",
    "max_files_per_scan",
    "metrics_max_files",
    "error_max_files",
    "max_file_bytes",
    "max_content_chars",
    "max_scan_depth",
    "structure_max_depth",
    "command_timeout_ms",
    "vcs_timeout_ms",
    "max_listed_files",
)


def load_config(config_path: Path) -> ServerConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)

    if not config_file.exists():
        return ServerConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults = ServerConfig()
    values: Dict[str, Any] = {}

    host = _as_str(data.get("host"))
    if host:
        values["host"] = host

    for name in _INT_FIELDS:
        number = _as_positive_int(data.get(name))
        if number is not None:
            values[name] = number

    values["exclude_paths"] = _as_str_list(data.get("exclude_paths"))

    root = config_file.parent
    workspace = _as_str(data.get("workspace_root"))
    if workspace:
        values["workspace_root"] = (root / Path(workspace).expanduser()).resolve()

    log_file = _as_str(data.get("log_file"))
    if log_file:
        values["log_file"] = root / Path(log_file).expanduser()

    return replace(defaults, **values)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "ServerConfig", "load_config"]
