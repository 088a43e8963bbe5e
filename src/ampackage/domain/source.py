"""Value objects describing template sources and the configuration document."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List

from .errors import SourceConfigError, SourceNotFoundError

DEFAULT_BRANCH = "main"
DEFAULT_BASE_PATH = "templates"
DEFAULT_TTL_MS = 3_600_000

_KIND_ALIASES = {
    "local": "local",
    "github": "github",
    "git": "github",
    "npm": "npm",
    "registry": "npm",
}


class SourceKind(str, Enum):
    """Closed set of source variants. Values are the persisted ``type`` strings."""

    LOCAL = "local"
    GIT = "github"
    REGISTRY = "npm"

    @classmethod
    def parse(cls, value: "str | SourceKind | None") -> "SourceKind":
        if isinstance(value, SourceKind):
            return value
        canonical = _KIND_ALIASES.get(str(value or "").strip().lower())
        if canonical is None:
            return cls.LOCAL
        return cls(canonical)


def validate_source_name(name: str) -> str:
    if not name or not name.strip():
        raise SourceConfigError("source name cannot be empty")
    if "/" in name or "\\" in name or name in {".", ".."}:
        raise SourceConfigError(f"source name '{name}' must not contain path separators")
    return name


@dataclass(frozen=True)
class Source:
    name: str
    kind: SourceKind = SourceKind.LOCAL
    location: str | None = None
    branch: str | None = None
    base_path: str = DEFAULT_BASE_PATH
    is_default: bool = False

    def __post_init__(self) -> None:
        validate_source_name(self.name)
        object.__setattr__(self, "kind", SourceKind.parse(self.kind))

    @property
    def effective_branch(self) -> str:
        return self.branch or DEFAULT_BRANCH

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "type": self.kind.value}
        if self.location is not None:
            payload["url"] = self.location
        payload["path"] = self.base_path
        if self.branch is not None:
            payload["branch"] = self.branch
        if self.is_default:
            payload["default"] = True
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Source":
        if not isinstance(data, dict) or "name" not in data:
            raise SourceConfigError("source entry must be an object with a 'name'")
        location = data.get("url")
        branch = data.get("branch")
        return cls(
            name=str(data["name"]),
            kind=SourceKind.parse(data.get("type")),
            location=str(location) if location is not None else None,
            branch=str(branch) if branch is not None else None,
            base_path=str(data.get("path") or DEFAULT_BASE_PATH),
            is_default=bool(data.get("default", False)),
        )


@dataclass(frozen=True)
class CacheSettings:
    enabled: bool = True
    ttl_ms: int = DEFAULT_TTL_MS

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_ms / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "ttl": self.ttl_ms}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheSettings":
        return cls(
            enabled=bool(data.get("enabled", True)),
            ttl_ms=int(data.get("ttl", DEFAULT_TTL_MS)),
        )


def default_sources() -> List[Source]:
    return [
        Source(
            name="local",
            kind=SourceKind.LOCAL,
            base_path="./templates",
            is_default=True,
        )
    ]


@dataclass
class ConfigDocument:
    """Root persisted object: ordered sources plus cache settings.

    Defaults are layered under a partial document one top-level key at a
    time; a present key replaces the default value wholesale.
    """

    sources: List[Source] = field(default_factory=default_sources)
    cache: CacheSettings = field(default_factory=CacheSettings)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "ConfigDocument":
        return cls()

    @classmethod
    def from_partial(cls, data: Dict[str, Any]) -> "ConfigDocument":
        document = cls.defaults()
        if "sources" in data:
            document.sources = [Source.from_dict(entry) for entry in data["sources"] or []]
        if "cache" in data:
            document.cache = CacheSettings.from_dict(data["cache"] or {})
        document.extra = {key: value for key, value in data.items() if key not in {"sources", "cache"}}
        return document

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        payload["sources"] = [source.to_dict() for source in self.sources]
        payload["cache"] = self.cache.to_dict()
        return payload

    def find(self, name: str) -> Source | None:
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def with_source(self, source: Source) -> "ConfigDocument":
        sources = list(self.sources)
        for index, existing in enumerate(sources):
            if existing.name == source.name:
                sources[index] = source
                break
        else:
            sources.append(source)
        return replace(self, sources=sources)

    def without_source(self, name: str) -> "ConfigDocument":
        remaining = [source for source in self.sources if source.name != name]
        if len(remaining) == len(self.sources):
            raise SourceNotFoundError(f"Source '{name}' not found")
        return replace(self, sources=remaining)
