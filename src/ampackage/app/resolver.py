"""Resolve templates across the configured sources in priority order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import requests

from ampackage.adapters.cache import TemplateCache
from ampackage.adapters.fetchers import build_fetcher
from ampackage.domain.errors import AmpackageError, TemplateResolutionError
from ampackage.domain.source import CacheSettings, Source
from ampackage.domain.template import TemplateKind, TemplateRef
from ampackage.ports.fetcher import TemplateFetcher
from ampackage.settings import RuntimeSettings
from ampackage.utils import telemetry


@dataclass(frozen=True)
class FetchResult:
    content: str
    source: Source


@dataclass
class TemplateListing:
    templates: Dict[TemplateKind, List[str]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


class TemplateResolver:
    """Try sources one at a time; the first that has the template wins."""

    def __init__(
        self,
        settings: RuntimeSettings,
        cache: TemplateCache,
        cache_settings: CacheSettings,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._cache_settings = cache_settings
        self._session = session

    def fetcher_for(self, source: Source) -> TemplateFetcher:
        return build_fetcher(source, self._settings, self._cache, self._cache_settings, self._session)

    def fetch_template(self, sources: Iterable[Source], kind: TemplateKind | str, name: str) -> FetchResult:
        ref = TemplateRef(TemplateKind.parse(kind), name)
        failures: List[tuple[str, str]] = []
        for source in sources:
            try:
                content = self.fetcher_for(source).fetch_file(ref.kind, ref.name)
            except AmpackageError as exc:
                failures.append((source.name, str(exc)))
                continue
            return FetchResult(content=content, source=source)
        raise TemplateResolutionError(failures)

    def list_all_templates(self, sources: Iterable[Source]) -> TemplateListing:
        merged: Dict[TemplateKind, set[str]] = {kind: set() for kind in TemplateKind}
        warnings: List[str] = []
        for source in sources:
            try:
                fetcher = self.fetcher_for(source)
                for kind in TemplateKind:
                    merged[kind].update(fetcher.list_templates(kind))
            except AmpackageError as exc:
                message = f"Could not list templates from {source.name}: {exc}"
                warnings.append(message)
                telemetry.record(self._settings, telemetry.listing_failed(source.name, str(exc)))
        return TemplateListing(
            templates={kind: sorted(names) for kind, names in merged.items()},
            warnings=warnings,
        )


__all__ = ["FetchResult", "TemplateListing", "TemplateResolver"]
