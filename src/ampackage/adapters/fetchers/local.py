"""Fetcher reading templates straight from a directory on disk."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ampackage.domain.errors import TemplateNotFoundError, TransportError
from ampackage.domain.source import Source
from ampackage.domain.template import TemplateKind, TemplateRef, template_names_in
from ampackage.ports.fetcher import TemplateFetcher
from ampackage.utils.textfiles import read_exact


def resolve_local_templates_dir(source: Source, templates_root: Path) -> Path:
    """Return ``location/basePath`` with relative locations anchored at ``templates_root``."""

    if source.location:
        root = Path(source.location).expanduser()
        if not root.is_absolute():
            root = templates_root / root
    else:
        root = templates_root
    return root / source.base_path


class LocalTemplateFetcher(TemplateFetcher):
    """The filesystem is the cache, so ``use_cache`` and ``ttl_ms`` are ignored."""

    def __init__(self, source: Source, templates_root: Path) -> None:
        super().__init__(source)
        self._templates_root = templates_root

    @property
    def templates_dir(self) -> Path:
        return resolve_local_templates_dir(self.source, self._templates_root)

    def fetch_file(
        self,
        kind: TemplateKind,
        name: str,
        use_cache: bool = True,
        ttl_ms: int | None = None,
    ) -> str:
        ref = TemplateRef(kind, name)
        file_path = self.templates_dir / ref.relative_path()
        if not file_path.is_file():
            raise TemplateNotFoundError(f"Template not found: {ref}")
        try:
            return read_exact(file_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise TransportError(f"failed to read {ref} from {self.source.name} ({file_path}): {exc}") from exc

    def list_templates(self, kind: TemplateKind, use_cache: bool = True) -> List[str]:
        return template_names_in(self.templates_dir / TemplateKind.parse(kind).plural)
