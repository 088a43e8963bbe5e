"""Port definition for per-source template fetchers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ampackage.domain.source import Source
from ampackage.domain.template import TemplateKind


class TemplateFetcher(ABC):
    """Uniform fetch/list contract implemented by every source variant."""

    def __init__(self, source: Source) -> None:
        self.source = source

    @abstractmethod
    def fetch_file(
        self,
        kind: TemplateKind,
        name: str,
        use_cache: bool = True,
        ttl_ms: int | None = None,
    ) -> str:
        """Return template content or raise ``TemplateNotFoundError``."""

    @abstractmethod
    def list_templates(self, kind: TemplateKind, use_cache: bool = True) -> List[str]:
        """Return template names of ``kind`` known to this source."""
