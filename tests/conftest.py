from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "ampackage-home"
os.environ.setdefault("AMPACKAGE_HOME", str(SANDBOX_HOME))
os.environ.setdefault("AMPACKAGE_TELEMETRY", "0")
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ampackage.domain.errors import GitCommandError  # noqa: E402
from ampackage.ports.git import GitClient  # noqa: E402
from ampackage.settings import RuntimeSettings  # noqa: E402


class FakeGitClient(GitClient):
    """In-memory stand-in recording every call; files are still written by the caller."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.current_branch: str | None = None
        self.created_branches: list[str] = []
        self.committed: dict[str, str] = {}
        self.staged: dict[str, str] = {}
        self.commits: list[tuple[str, str]] = []
        self.pushes: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()

    def _record(self, op: str, *args: object) -> None:
        self.calls.append((op, *(str(arg) for arg in args)))
        if op in self.fail_on:
            raise GitCommandError(["git", op], 1, f"{op} rejected")

    def clone(self, url: str, dest: Path, *, branch: str | None = None) -> None:
        self._record("clone", url, dest)
        dest.mkdir(parents=True, exist_ok=True)
        self.current_branch = branch or "main"

    def fetch(self, repo: Path) -> None:
        self._record("fetch", repo)

    def checkout(self, repo: Path, branch: str) -> None:
        self._record("checkout", branch)
        self.current_branch = branch

    def create_branch(self, repo: Path, branch: str) -> None:
        self._record("create_branch", branch)
        self.created_branches.append(branch)
        self.current_branch = branch

    def pull(self, repo: Path, remote: str, branch: str) -> None:
        self._record("pull", remote, branch)

    def add(self, repo: Path, path: Path) -> None:
        self._record("add", path.relative_to(repo).as_posix())
        self.staged[path.relative_to(repo).as_posix()] = path.read_text(encoding="utf-8")

    def has_staged_changes(self, repo: Path) -> bool:
        return any(self.committed.get(key) != value for key, value in self.staged.items())

    def commit(self, repo: Path, message: str) -> None:
        self._record("commit", message)
        self.committed.update(self.staged)
        self.staged.clear()
        self.commits.append((str(self.current_branch), message))

    def push(self, repo: Path, remote: str, branch: str) -> None:
        self._record("push", remote, branch)
        self.pushes.append((remote, branch))


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    home = tmp_path / "runtime" / "home"
    templates_root = tmp_path / "runtime" / "package"
    for directory in (home, templates_root):
        directory.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(
        home_dir=home,
        cache_dir=home / "cache",
        repos_dir=home / "repos",
        log_dir=home / "logs",
        templates_root=templates_root,
    )


@pytest.fixture()
def fake_git() -> FakeGitClient:
    return FakeGitClient()


def write_template(root: Path, plural: str, filename: str, content: str) -> Path:
    path = root / plural / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def template_writer():
    return write_template
