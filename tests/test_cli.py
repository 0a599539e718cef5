"""CLI parser behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

import pytest

from projectlens.cli import _build_parser, main
from projectlens.logging import get_logger
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "serve"])
    assert args.verbose is True
    assert args.command == "serve"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--verbose"])
    assert args.verbose is True
    assert args.command == "serve"


def test_cli_serve_overrides() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--host", "0.0.0.0", "--port", "4100", "--log-file", "out.log"])
    assert args.host == "0.0.0.0"
    assert args.port == 4100
    assert args.log_file == Path("out.log")
    assert args.config == "."


def test_cli_analyze_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze"])
    assert args.command == "analyze"
    assert args.path == "."
    assert args.files is False
    assert args.dependencies is False
    assert args.errors is False


def test_cli_requires_a_command() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_analyze_prints_json_payload(
    project: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    project.write({"index.js": "console.log('hi')\n", "requirements.txt": "flask\n"})

    main(["analyze", str(project.path()), "--errors", "--dependencies", "--config", str(project.path())])

    payload = json.loads(capsys.readouterr().out)
    assert set(payload) == {"files", "structure", "errors", "dependencies", "gitInfo", "metrics"}
    assert payload["files"] == []
    assert payload["errors"][0]["kind"] == "code_smell"
    assert payload["dependencies"]["requirements"] == ["flask"]


def test_analyze_missing_path_exits_with_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "missing"), "--config", str(tmp_path)])
    assert excinfo.value.code == 1


def test_invalid_config_exits_with_error(tmp_path: Path) -> None:
    (tmp_path / ".projectlens.yml").write_text("port: [unclosed\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path), "--config", str(tmp_path)])
    assert excinfo.value.code == 1
