"""On-disk cache of remotely fetched templates with lazy TTL expiry."""

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from ampackage.domain.errors import TransportError
from ampackage.domain.source import Source
from ampackage.domain.template import TemplateKind, TemplateRef, template_names_in
from ampackage.utils.textfiles import read_exact, write_exact


@dataclass(frozen=True)
class CacheEntry:
    source_name: str
    kind: TemplateKind
    name: str
    path: Path
    size_bytes: int
    age_seconds: float


class TemplateCache:
    """Stores one file per ``(source, kind, name)`` under ``cache_dir``.

    Entries are never evicted proactively; staleness is checked when read.
    """

    def __init__(self, cache_dir: Path, *, clock: Callable[[], float] = time.time) -> None:
        self._cache_dir = cache_dir
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, source: Source, kind: TemplateKind, name: str) -> Path:
        ref = TemplateRef(kind, name)
        return self._cache_dir / source.name / ref.relative_path()

    def get(self, source: Source, kind: TemplateKind, name: str, ttl_ms: int) -> str | None:
        path = self.path_for(source, kind, name)
        try:
            age = self._clock() - path.stat().st_mtime
        except FileNotFoundError:
            return None
        if age * 1000.0 >= ttl_ms:
            return None
        try:
            return read_exact(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise TransportError(f"failed to read cached {kind.value}/{name} for {source.name} ({path}): {exc}") from exc

    def set(self, source: Source, kind: TemplateKind, name: str, content: str) -> Path:
        path = self.path_for(source, kind, name)
        write_exact(path, content)
        return path

    def list_cached(self, source: Source, kind: TemplateKind) -> List[str]:
        return template_names_in(self._cache_dir / source.name / kind.plural)

    def entries(self, source_name: str | None = None) -> List[CacheEntry]:
        if not self._cache_dir.exists():
            return []
        if source_name is not None:
            source_dirs = [self._cache_dir / source_name]
        else:
            source_dirs = sorted(p for p in self._cache_dir.iterdir() if p.is_dir())
        now = self._clock()
        found: List[CacheEntry] = []
        for source_dir in source_dirs:
            for kind in TemplateKind:
                kind_dir = source_dir / kind.plural
                for name in template_names_in(kind_dir):
                    path = kind_dir / f"{name}{kind.extension}"
                    if not path.exists():
                        continue
                    stat = path.stat()
                    found.append(
                        CacheEntry(
                            source_name=source_dir.name,
                            kind=kind,
                            name=name,
                            path=path,
                            size_bytes=stat.st_size,
                            age_seconds=max(0.0, now - stat.st_mtime),
                        )
                    )
        return found

    def clear(self, source_name: str | None = None) -> int:
        target = self._cache_dir / source_name if source_name is not None else self._cache_dir
        if not target.exists():
            return 0
        removed = sum(1 for candidate in target.rglob("*") if candidate.is_file())
        shutil.rmtree(target)
        return removed


__all__ = ["CacheEntry", "TemplateCache"]
