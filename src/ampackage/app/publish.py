"""Publish project files back to a template source."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from ampackage.adapters.fetchers import github_repo_path, resolve_local_templates_dir
from ampackage.domain.errors import AmpackageError, SourceConfigError, SourceNotSupportedError, TransportError
from ampackage.domain.source import Source, SourceKind
from ampackage.domain.template import TemplateKind, TemplateRef
from ampackage.ports.git import GitClient
from ampackage.settings import RuntimeSettings
from ampackage.utils.textfiles import write_exact

REMOTE = "origin"


class PushStatus(str, Enum):
    WRITTEN = "written"
    ALREADY_EXISTS = "already_exists"
    PUSHED = "pushed"
    BRANCH_PUSHED = "branch_pushed"
    NOTHING_TO_COMMIT = "nothing_to_commit"


@dataclass(frozen=True)
class PushOptions:
    overwrite: bool = False
    review_branch: bool = False
    message: str | None = None


@dataclass(frozen=True)
class PushResult:
    status: PushStatus
    source: Source
    path: Path
    branch: str | None = None
    compare_url: str | None = None


def compare_url(repo_url: str, branch: str) -> str | None:
    """Return the GitHub compare page for ``branch``, or None for non-GitHub remotes."""

    try:
        repo_path = github_repo_path(repo_url)
    except SourceConfigError:
        return None
    return f"https://github.com/{repo_path}/compare/{branch}"


def review_branch_name(ref: TemplateRef, now: float) -> str:
    return f"add-{ref.kind.value}-{ref.name}-{int(now * 1000)}"


class PublishService:
    """Write a template into a local source, or commit and push it to a Git source."""

    def __init__(
        self,
        settings: RuntimeSettings,
        git: GitClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._git = git
        self._clock = clock

    def push(
        self,
        source: Source,
        kind: TemplateKind | str,
        name: str,
        content: str,
        options: PushOptions | None = None,
    ) -> PushResult:
        ref = TemplateRef(TemplateKind.parse(kind), name)
        options = options or PushOptions()
        if source.kind is SourceKind.LOCAL:
            return self._push_local(source, ref, content, options)
        if source.kind is SourceKind.GIT:
            if not source.location:
                raise SourceConfigError(f"Source '{source.name}' has no repository URL")
            try:
                return self._push_git(source, ref, content, options)
            except (AmpackageError, OSError) as exc:
                raise TransportError(f"failed to push {ref} to {source.name}: {exc}") from exc
        raise SourceNotSupportedError(f"Pushing to {source.kind.value} sources is not supported")

    def _push_local(self, source: Source, ref: TemplateRef, content: str, options: PushOptions) -> PushResult:
        target = resolve_local_templates_dir(source, self._settings.templates_root) / ref.relative_path()
        if target.exists() and not options.overwrite:
            return PushResult(status=PushStatus.ALREADY_EXISTS, source=source, path=target)
        try:
            write_exact(target, content)
        except OSError as exc:
            raise TransportError(f"failed to push {ref} to {source.name}: {exc}") from exc
        return PushResult(status=PushStatus.WRITTEN, source=source, path=target)

    def _push_git(self, source: Source, ref: TemplateRef, content: str, options: PushOptions) -> PushResult:
        repo = self._ensure_repo(source)
        base_branch = source.effective_branch
        path = self._write_and_stage(repo, source, ref, content)
        if not self._git.has_staged_changes(repo):
            return PushResult(status=PushStatus.NOTHING_TO_COMMIT, source=source, path=path)

        if not options.review_branch:
            self._git.commit(repo, options.message or f"Update {ref.kind.value}: {ref.name}")
            self._git.push(repo, REMOTE, base_branch)
            return PushResult(status=PushStatus.PUSHED, source=source, path=path, branch=base_branch)

        branch = review_branch_name(ref, self._clock())
        # the staged change moves onto the new branch with it
        self._git.create_branch(repo, branch)
        try:
            self._git.commit(repo, options.message or f"Add {ref.kind.value}: {ref.name}")
            self._git.push(repo, REMOTE, branch)
        finally:
            self._git.checkout(repo, base_branch)
        return PushResult(
            status=PushStatus.BRANCH_PUSHED,
            source=source,
            path=path,
            branch=branch,
            compare_url=compare_url(str(source.location), branch),
        )

    def _ensure_repo(self, source: Source) -> Path:
        repo = self._settings.repo_dir_for(source.name)
        branch = source.effective_branch
        if repo.exists():
            self._git.fetch(repo)
            self._git.checkout(repo, branch)
            self._git.pull(repo, REMOTE, branch)
        else:
            repo.parent.mkdir(parents=True, exist_ok=True)
            self._git.clone(str(source.location), repo, branch=branch)
        return repo

    def _write_and_stage(self, repo: Path, source: Source, ref: TemplateRef, content: str) -> Path:
        path = repo / source.base_path / ref.relative_path()
        write_exact(path, content)
        self._git.add(repo, path)
        return path


__all__ = [
    "PublishService",
    "PushOptions",
    "PushResult",
    "PushStatus",
    "compare_url",
    "review_branch_name",
]
