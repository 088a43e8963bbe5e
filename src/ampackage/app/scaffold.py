"""Copy resolved templates into a project and read project files for publishing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List

from ampackage.domain.errors import AmpackageError, TemplateNotFoundError, TransportError
from ampackage.domain.source import Source, SourceKind
from ampackage.domain.template import TemplateKind, TemplateRef
from ampackage.utils.textfiles import read_exact, write_exact

from .resolver import TemplateResolver

DEFAULT_DEST = "src"


class AddStatus(str, Enum):
    ADDED = "added"
    EXISTS = "exists"
    FAILED = "failed"


@dataclass(frozen=True)
class AddOutcome:
    kind: TemplateKind
    name: str
    status: AddStatus
    target: Path | None = None
    source: Source | None = None
    error: str | None = None


def project_template_path(project_root: Path, dest: str, ref: TemplateRef) -> Path:
    return project_root / dest / ref.relative_path()


class ScaffoldService:
    def __init__(self, resolver: TemplateResolver) -> None:
        self._resolver = resolver

    def add(
        self,
        sources: List[Source],
        kind: TemplateKind | str,
        names: Iterable[str],
        project_root: Path,
        *,
        dest: str = DEFAULT_DEST,
        overwrite: bool = False,
    ) -> List[AddOutcome]:
        """Resolve and write each name; one failure never stops the remaining names."""

        template_kind = TemplateKind.parse(kind)
        outcomes: List[AddOutcome] = []
        for name in names:
            outcomes.append(self._add_one(sources, template_kind, name, project_root, dest, overwrite))
        return outcomes

    def _add_one(
        self,
        sources: List[Source],
        kind: TemplateKind,
        name: str,
        project_root: Path,
        dest: str,
        overwrite: bool,
    ) -> AddOutcome:
        try:
            ref = TemplateRef(kind, name)
            target = project_template_path(project_root, dest, ref)
            if target.exists() and not overwrite:
                return AddOutcome(kind=kind, name=name, status=AddStatus.EXISTS, target=target)
            result = self._resolver.fetch_template(sources, kind, name)
            try:
                write_exact(target, result.content)
            except OSError as exc:
                raise TransportError(f"failed to write {target}: {exc}") from exc
        except AmpackageError as exc:
            return AddOutcome(kind=kind, name=name, status=AddStatus.FAILED, error=str(exc))
        return AddOutcome(kind=kind, name=name, status=AddStatus.ADDED, target=target, source=result.source)


def read_project_file(project_root: Path, kind: TemplateKind | str, name: str, *, dest: str = DEFAULT_DEST) -> str:
    ref = TemplateRef(TemplateKind.parse(kind), name)
    path = project_template_path(project_root, dest, ref)
    if not path.is_file():
        raise TemplateNotFoundError(f"Source file not found: {path}")
    try:
        return read_exact(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise TransportError(f"failed to read {path}: {exc}") from exc


def default_push_target(sources: List[Source]) -> Source | None:
    for source in sources:
        if source.kind is SourceKind.LOCAL:
            return source
    return sources[0] if sources else None


__all__ = [
    "AddOutcome",
    "AddStatus",
    "DEFAULT_DEST",
    "ScaffoldService",
    "default_push_target",
    "project_template_path",
    "read_project_file",
]
