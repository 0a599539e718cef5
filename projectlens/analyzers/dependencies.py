"""Root-level dependency manifest reader."""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List

from ..logging import get_logger
from ..models import Result


@dataclass(frozen=True)
class Manifest:
    """Known manifest file for one ecosystem."""

    ecosystem: str
    filename: str
    parser: Callable[[str], Any]
    empty: Callable[[], Any]


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _load_json_object(text: str, filename: str) -> Dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{filename} must contain a JSON object")
    return data


def _parse_package_json(text: str) -> Dict[str, Any]:
    data = _load_json_object(text, "package.json")
    return {
        "dependencies": _mapping(data.get("dependencies")),
        "devDependencies": _mapping(data.get("devDependencies")),
        "scripts": _mapping(data.get("scripts")),
    }


def _parse_composer_json(text: str) -> Dict[str, Any]:
    data = _load_json_object(text, "composer.json")
    return {
        "require": _mapping(data.get("require")),
        "require-dev": _mapping(data.get("require-dev")),
    }


def _parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        packages.append(stripped)
    return packages


def _parse_gemfile(text: str) -> List[str]:
    return text.splitlines()


def _parse_cargo_toml(text: str) -> Dict[str, Any]:
    data = tomllib.loads(text)
    return {
        "dependencies": _mapping(data.get("dependencies")),
        "dev-dependencies": _mapping(data.get("dev-dependencies")),
    }


def _parse_pyproject(text: str) -> Dict[str, Any]:
    data = tomllib.loads(text)
    project = _mapping(data.get("project"))
    dependencies = project.get("dependencies")
    return {
        "dependencies": list(dependencies) if isinstance(dependencies, list) else [],
        "optional-dependencies": _mapping(project.get("optional-dependencies")),
    }


_GO_REQUIRE_LINE = re.compile(r"^require\s+(?!\()(.+)$")


def _parse_go_mod(text: str) -> List[str]:
    modules: List[str] = []
    in_block = False
    for raw_line in text.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not line:
            continue
        if in_block:
            if line == ")":
                in_block = False
            else:
                modules.append(line)
            continue
        if re.match(r"^require\s*\($", line):
            in_block = True
            continue
        match = _GO_REQUIRE_LINE.match(line)
        if match:
            modules.append(match.group(1).strip())
    return modules


MANIFESTS: tuple[Manifest, ...] = (
    Manifest("package", "package.json", _parse_package_json, dict),
    Manifest("requirements", "requirements.txt", _parse_requirements, list),
    Manifest("gemfile", "Gemfile", _parse_gemfile, list),
    Manifest("composer", "composer.json", _parse_composer_json, dict),
    Manifest("cargo", "Cargo.toml", _parse_cargo_toml, dict),
    Manifest("gomod", "go.mod", _parse_go_mod, list),
    Manifest("pyproject", "pyproject.toml", _parse_pyproject, dict),
)


class DependencyReader:
    """Extracts declared dependencies from manifests at the project root.

    Every known ecosystem is always present in the output. A manifest that is
    missing, unreadable or malformed is reported as that ecosystem's empty
    structure; one bad manifest never hides the others.
    """

    def __init__(self, manifests: tuple[Manifest, ...] = MANIFESTS) -> None:
        self.manifests = manifests
        self.logger = get_logger("dependencies")

    def read(self, root: str | Path) -> Dict[str, Any]:
        return {name: result.value for name, result in self.read_results(root).items()}

    def read_results(self, root: str | Path) -> Dict[str, Result[Any]]:
        """Return one ``Result`` per ecosystem, failures carrying their cause."""
        root_path = Path(root)
        return {manifest.ecosystem: self._read_manifest(root_path, manifest) for manifest in self.manifests}

    def _read_manifest(self, root: Path, manifest: Manifest) -> Result[Any]:
        path = root / manifest.filename
        if not path.is_file():
            return Result.success(manifest.empty())
        try:
            value = manifest.parser(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as exc:
            # JSONDecodeError, TOMLDecodeError and UnicodeDecodeError are ValueErrors;
            # deeply nested documents raise RecursionError.
            self.logger.warning("Ignoring malformed manifest %s: %s", path, exc)
            return Result.failure(manifest.empty(), exc)
        return Result.success(value)


__all__ = ["DependencyReader", "MANIFESTS", "Manifest"]
