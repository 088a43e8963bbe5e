"""Port for the narrow set of Git operations publishing relies on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class GitClient(ABC):
    @abstractmethod
    def clone(self, url: str, dest: Path, *, branch: str | None = None) -> None:
        """Clone ``url`` into ``dest``."""

    @abstractmethod
    def fetch(self, repo: Path) -> None:
        """Fetch all remotes."""

    @abstractmethod
    def checkout(self, repo: Path, branch: str) -> None:
        """Switch to an existing branch."""

    @abstractmethod
    def create_branch(self, repo: Path, branch: str) -> None:
        """Create ``branch`` at HEAD and switch to it."""

    @abstractmethod
    def pull(self, repo: Path, remote: str, branch: str) -> None:
        """Merge ``remote/branch`` into the current branch."""

    @abstractmethod
    def add(self, repo: Path, path: Path) -> None:
        """Stage ``path``."""

    @abstractmethod
    def has_staged_changes(self, repo: Path) -> bool:
        """Return True when the index differs from HEAD."""

    @abstractmethod
    def commit(self, repo: Path, message: str) -> None:
        """Commit the index."""

    @abstractmethod
    def push(self, repo: Path, remote: str, branch: str) -> None:
        """Push ``branch`` to ``remote``."""
