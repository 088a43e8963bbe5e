"""Placeholder fetcher for package-registry (npm) sources."""

from __future__ import annotations

from typing import List

from ampackage.domain.errors import SourceNotSupportedError
from ampackage.domain.template import TemplateKind
from ampackage.ports.fetcher import TemplateFetcher


class RegistryTemplateFetcher(TemplateFetcher):
    def fetch_file(
        self,
        kind: TemplateKind,
        name: str,
        use_cache: bool = True,
        ttl_ms: int | None = None,
    ) -> str:
        raise SourceNotSupportedError("npm source fetching not yet implemented")

    def list_templates(self, kind: TemplateKind, use_cache: bool = True) -> List[str]:
        raise SourceNotSupportedError("npm source listing not yet implemented")
