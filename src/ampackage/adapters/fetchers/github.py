"""Fetcher downloading raw template files from a GitHub repository."""

from __future__ import annotations

from typing import List

import requests

from ampackage import __version__
from ampackage.adapters.cache import TemplateCache
from ampackage.domain.errors import SourceConfigError, TemplateNotFoundError, TransportError
from ampackage.domain.source import CacheSettings, Source
from ampackage.domain.template import TemplateKind, TemplateRef
from ampackage.ports.fetcher import TemplateFetcher

RAW_BASE_URL = "https://raw.githubusercontent.com"
REQUEST_TIMEOUT = 30
_GITHUB_PREFIXES = ("https://github.com/", "http://github.com/", "git@github.com:")


def github_repo_path(url: str | None) -> str:
    """Return ``owner/repo`` for a GitHub repository URL."""

    if not url or "github.com" not in url:
        raise SourceConfigError(f"Invalid GitHub URL format: {url!r}")
    repo_path = url.strip()
    for prefix in _GITHUB_PREFIXES:
        if repo_path.startswith(prefix):
            repo_path = repo_path[len(prefix):]
            break
    repo_path = repo_path.rstrip("/")
    if repo_path.endswith(".git"):
        repo_path = repo_path[: -len(".git")]
    return repo_path


def _normalise_base_path(base_path: str) -> str:
    base = base_path.strip("/")
    while base.startswith("./"):
        base = base[2:]
    return base


class GitHubTemplateFetcher(TemplateFetcher):
    def __init__(
        self,
        source: Source,
        cache: TemplateCache,
        cache_settings: CacheSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source)
        self._cache = cache
        self._cache_settings = cache_settings
        self._session = session or requests.Session()

    def build_raw_url(self, kind: TemplateKind, name: str) -> str:
        ref = TemplateRef(kind, name)
        parts = [
            RAW_BASE_URL,
            github_repo_path(self.source.location),
            self.source.effective_branch,
            _normalise_base_path(self.source.base_path),
            ref.relative_path().as_posix(),
        ]
        return "/".join(part for part in parts if part)

    def fetch_file(
        self,
        kind: TemplateKind,
        name: str,
        use_cache: bool = True,
        ttl_ms: int | None = None,
    ) -> str:
        ref = TemplateRef(kind, name)
        caching = use_cache and self._cache_settings.enabled
        if caching:
            ttl = ttl_ms if ttl_ms is not None else self._cache_settings.ttl_ms
            cached = self._cache.get(self.source, ref.kind, ref.name, ttl)
            if cached is not None:
                return cached

        url = self.build_raw_url(ref.kind, ref.name)
        try:
            response = self._session.get(
                url,
                headers={"User-Agent": f"ampackage/{__version__}"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to fetch from GitHub ({url}): {exc}") from exc

        if response.status_code == 404:
            raise TemplateNotFoundError(f"Template not found: {ref}")
        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Failed to fetch from GitHub ({url}): {response.status_code} {response.reason}"
            )

        content = response.text
        if caching:
            self._cache.set(self.source, ref.kind, ref.name, content)
        return content

    def list_templates(self, kind: TemplateKind, use_cache: bool = True) -> List[str]:
        # No remote listing: only names fetched before (and still on disk) are visible.
        if use_cache:
            return self._cache.list_cached(self.source, TemplateKind.parse(kind))
        return []
