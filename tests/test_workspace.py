"""Tests for projectlens.workspace."""

from __future__ import annotations

from pathlib import Path

import pytest

from projectlens.workspace import Workspace, WorkspaceError


def test_unconfined_workspace_accepts_any_path(tmp_path: Path) -> None:
    target = tmp_path / "anywhere.txt"

    assert Workspace().resolve(str(target)) == target.resolve()
    assert Workspace().root is None


def test_confined_workspace_resolves_relative_paths_inside_root(tmp_path: Path) -> None:
    workspace = Workspace(tmp_path)

    assert workspace.resolve("src/app.py") == (tmp_path / "src" / "app.py").resolve()
    assert workspace.resolve(str(tmp_path)) == tmp_path.resolve()


@pytest.mark.parametrize("escape", ["../outside.txt", "/etc/passwd", "src/../../x"])
def test_confined_workspace_rejects_escapes(tmp_path: Path, escape: str) -> None:
    root = tmp_path / "root"
    root.mkdir()

    with pytest.raises(WorkspaceError):
        Workspace(root).resolve(escape)


def test_write_file_overwrites_contents(tmp_path: Path) -> None:
    target = tmp_path / "notes.txt"
    target.write_text("old", encoding="utf-8")

    written = Workspace(tmp_path).write_file("notes.txt", "new")

    assert written == target.resolve()
    assert target.read_text(encoding="utf-8") == "new"


def test_write_file_does_not_create_missing_directories(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Workspace(tmp_path).write_file("missing/notes.txt", "x")
