from __future__ import annotations

import json
from pathlib import Path

import pytest

from ampackage.adapters.cache import TemplateCache
from ampackage.app.resolver import TemplateResolver
from ampackage.domain.errors import TemplateResolutionError
from ampackage.domain.source import CacheSettings, Source, SourceKind
from ampackage.domain.template import TemplateKind
from ampackage.settings import RuntimeSettings


def _resolver(settings: RuntimeSettings) -> TemplateResolver:
    return TemplateResolver(settings, TemplateCache(settings.cache_dir), CacheSettings())


def _local(tmp_path: Path, name: str) -> Source:
    root = tmp_path / name
    (root / "templates").mkdir(parents=True, exist_ok=True)
    return Source(name, kind=SourceKind.LOCAL, location=str(root))


def test_first_source_with_template_wins(runtime_settings: RuntimeSettings, tmp_path: Path, template_writer) -> None:
    first = _local(tmp_path, "first")
    second = _local(tmp_path, "second")
    third = _local(tmp_path, "third")
    template_writer(tmp_path / "second" / "templates", "components", "Button.tsx", "from second")
    template_writer(tmp_path / "third" / "templates", "components", "Button.tsx", "from third")

    result = _resolver(runtime_settings).fetch_template([first, second, third], "component", "Button")

    assert result.content == "from second"
    assert result.source.name == "second"


def test_aggregate_error_lists_every_source(runtime_settings: RuntimeSettings, tmp_path: Path) -> None:
    sources = [
        _local(tmp_path, "a"),
        Source("npm", kind=SourceKind.REGISTRY, location="@acme/templates"),
        _local(tmp_path, "b"),
    ]
    with pytest.raises(TemplateResolutionError) as excinfo:
        _resolver(runtime_settings).fetch_template(sources, TemplateKind.HOOK, "useMissing")

    error = excinfo.value
    assert [name for name, _ in error.failures] == ["a", "npm", "b"]
    lines = str(error).splitlines()
    assert lines[0] == "Template not found in any source:"
    assert lines[1] == "a: Template not found: hook/useMissing"
    assert lines[2] == "npm: npm source fetching not yet implemented"
    assert len(lines) == 4


def test_unexpected_errors_are_not_swallowed(runtime_settings: RuntimeSettings, tmp_path: Path, monkeypatch) -> None:
    resolver = _resolver(runtime_settings)

    def boom(source: Source):
        raise KeyError(source.name)

    monkeypatch.setattr(resolver, "fetcher_for", boom)
    with pytest.raises(KeyError):
        resolver.fetch_template([_local(tmp_path, "a")], "util", "x")


def test_listing_merges_sorts_and_deduplicates(runtime_settings: RuntimeSettings, tmp_path: Path, template_writer) -> None:
    first = _local(tmp_path, "first")
    second = _local(tmp_path, "second")
    template_writer(tmp_path / "first" / "templates", "components", "Modal.tsx", "m")
    template_writer(tmp_path / "first" / "templates", "components", "Button.tsx", "b")
    template_writer(tmp_path / "second" / "templates", "components", "Button.tsx", "b2")
    template_writer(tmp_path / "second" / "templates", "utils", "formatDate.ts", "f")

    listing = _resolver(runtime_settings).list_all_templates([first, second])

    assert listing.templates[TemplateKind.COMPONENT] == ["Button", "Modal"]
    assert listing.templates[TemplateKind.HOOK] == []
    assert listing.templates[TemplateKind.UTIL] == ["formatDate"]
    assert listing.warnings == []


def test_listing_warns_and_continues_on_failing_source(
    runtime_settings: RuntimeSettings, tmp_path: Path, template_writer, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("AMPACKAGE_TELEMETRY", "1")
    local = _local(tmp_path, "local")
    template_writer(tmp_path / "local" / "templates", "hooks", "useAuth.ts", "u")
    registry = Source("npm", kind=SourceKind.REGISTRY, location="@acme/templates")

    listing = _resolver(runtime_settings).list_all_templates([registry, local])

    assert listing.templates[TemplateKind.HOOK] == ["useAuth"]
    assert len(listing.warnings) == 1
    assert listing.warnings[0].startswith("Could not list templates from npm")

    log_path = runtime_settings.log_dir / "telemetry.jsonl"
    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert records[-1]["event"] == "templates.list"
    assert records[-1]["level"] == "warn"
