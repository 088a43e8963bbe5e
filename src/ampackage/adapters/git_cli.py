"""GitClient implementation backed by the ``git`` executable."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from ampackage.domain.errors import GitCommandError
from ampackage.ports.git import GitClient


class SubprocessGitClient(GitClient):
    def __init__(self, executable: str = "git") -> None:
        self._executable = executable

    def clone(self, url: str, dest: Path, *, branch: str | None = None) -> None:
        args = ["clone"]
        if branch:
            args += ["--branch", branch]
        args += [url, str(dest)]
        self._run(args)

    def fetch(self, repo: Path) -> None:
        self._run(["fetch", "--all", "--prune"], cwd=repo)

    def checkout(self, repo: Path, branch: str) -> None:
        self._run(["checkout", branch], cwd=repo)

    def create_branch(self, repo: Path, branch: str) -> None:
        self._run(["checkout", "-b", branch], cwd=repo)

    def pull(self, repo: Path, remote: str, branch: str) -> None:
        self._run(["pull", "--ff-only", remote, branch], cwd=repo)

    def add(self, repo: Path, path: Path) -> None:
        self._run(["add", "--", str(path)], cwd=repo)

    def has_staged_changes(self, repo: Path) -> bool:
        result = self._run(["diff", "--cached", "--quiet"], cwd=repo, check=False)
        if result.returncode not in (0, 1):
            raise GitCommandError(self._command(["diff", "--cached", "--quiet"]), result.returncode, result.stderr)
        return result.returncode == 1

    def commit(self, repo: Path, message: str) -> None:
        self._run(["commit", "-m", message], cwd=repo)

    def push(self, repo: Path, remote: str, branch: str) -> None:
        self._run(["push", remote, branch], cwd=repo)

    def _command(self, args: Sequence[str]) -> list[str]:
        return [self._executable, *args]

    def _run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        command = self._command(args)
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(command, 127, f"{self._executable} executable not found") from exc
        if check and result.returncode != 0:
            raise GitCommandError(command, result.returncode, result.stderr or result.stdout)
        return result


__all__ = ["SubprocessGitClient"]
