"""Read-only Git metadata collection."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List

from ..logging import get_logger
from ..models import Result, VCSInfo

DEFAULT_TIMEOUT = 5.0
BRANCH_FALLBACK = "HEAD"

BRANCH_ARGS = ("git", "branch", "--show-current")
LAST_COMMIT_ARGS = ("git", "log", "-1", "--pretty=format:%h - %s (%an, %ar)")
STATUS_ARGS = ("git", "status", "--porcelain")
REMOTES_ARGS = ("git", "remote", "-v")

Runner = Callable[..., str]


class GitInfoCollector:
    """Reports branch, last commit, working-tree status and remotes.

    ``runner(args, *, cwd, timeout)`` returns the command's stdout and raises
    on a non-zero exit or timeout. Each of the four queries fails on its own:
    a broken ``git log`` leaves the branch, status and remotes intact.
    """

    def __init__(self, runner: Runner | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._runner = runner or self._default_runner
        self.timeout = timeout
        self.logger = get_logger("git")

    def collect(self, repo_path: str | Path) -> VCSInfo:
        repo = Path(repo_path)
        if not (repo / ".git").exists():
            return VCSInfo()

        branch = self._query(BRANCH_ARGS, repo, BRANCH_FALLBACK)
        last_commit = self._query(LAST_COMMIT_ARGS, repo, "")
        status = self._query(STATUS_ARGS, repo, "")
        remotes = self._query(REMOTES_ARGS, repo, "")

        return VCSInfo(
            is_repository=True,
            branch=branch.value.strip(),
            last_commit=last_commit.value.strip(),
            status=status.value.strip(),
            remotes=_split_lines(remotes.value),
        )

    def _query(self, args: Iterable[str], repo: Path, fallback: str) -> Result[str]:
        try:
            output = self._runner(list(args), cwd=repo, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            self.logger.debug("%s failed in %s: %s", " ".join(args), repo, exc)
            return Result.failure(fallback, exc)
        return Result.success(output)

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path, timeout: float) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        return completed.stdout


def _split_lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


__all__ = ["GitInfoCollector", "Runner"]
