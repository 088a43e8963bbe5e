"""Fetcher variants and the factory selecting one per source kind."""

from __future__ import annotations

import requests

from ampackage.adapters.cache import TemplateCache
from ampackage.domain.source import CacheSettings, Source, SourceKind
from ampackage.ports.fetcher import TemplateFetcher
from ampackage.settings import RuntimeSettings

from .github import GitHubTemplateFetcher, github_repo_path
from .local import LocalTemplateFetcher, resolve_local_templates_dir
from .registry import RegistryTemplateFetcher


def build_fetcher(
    source: Source,
    settings: RuntimeSettings,
    cache: TemplateCache,
    cache_settings: CacheSettings,
    session: requests.Session | None = None,
) -> TemplateFetcher:
    kind = source.kind
    if kind is SourceKind.LOCAL:
        return LocalTemplateFetcher(source, settings.templates_root)
    if kind is SourceKind.GIT:
        return GitHubTemplateFetcher(source, cache, cache_settings, session=session)
    if kind is SourceKind.REGISTRY:
        return RegistryTemplateFetcher(source)
    raise AssertionError(f"unhandled source kind: {kind!r}")


__all__ = [
    "GitHubTemplateFetcher",
    "LocalTemplateFetcher",
    "RegistryTemplateFetcher",
    "build_fetcher",
    "github_repo_path",
    "resolve_local_templates_dir",
]
