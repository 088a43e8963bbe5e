"""JSON-backed store for the configuration document."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List

import jsonschema

from ampackage.domain.errors import SourceConfigError, SourceNotFoundError
from ampackage.domain.source import ConfigDocument, Source, SourceKind, DEFAULT_BASE_PATH
from ampackage.resources import load_schema
from ampackage.settings import RuntimeSettings
from ampackage.utils import telemetry

CONFIG_FILENAME = ".ampackage.json"


class JsonConfigStore:
    """Loads and persists ``.ampackage.json`` from the project or home directory."""

    def __init__(self, settings: RuntimeSettings, *, cwd: Path | None = None, home: Path | None = None) -> None:
        self._settings = settings
        self._cwd = cwd if cwd is not None else Path.cwd()
        self._home = home if home is not None else Path.home()

    @property
    def path(self) -> Path:
        local_config = self._cwd / CONFIG_FILENAME
        if local_config.exists():
            return local_config
        return self._home / CONFIG_FILENAME

    def load(self) -> ConfigDocument:
        config_path = self.path
        if not config_path.exists():
            return ConfigDocument.defaults()
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("configuration root must be a JSON object")
            jsonschema.validate(data, load_schema("config.schema.json"))
            return ConfigDocument.from_partial(data)
        except (OSError, ValueError, SourceConfigError, jsonschema.ValidationError) as exc:
            message = getattr(exc, "message", None) or str(exc)
            sys.stderr.write(f"ampackage: error loading config {config_path}, using defaults: {message}\n")
            defaults = ConfigDocument.defaults()
            try:
                telemetry.record(self._settings, telemetry.config_fallback(str(config_path), message))
            except OSError as log_exc:
                sys.stderr.write(f"ampackage: could not record telemetry: {log_exc}\n")
            return defaults

    def save(self, document: ConfigDocument) -> Path:
        config_path = self.path
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        return config_path

    def add_source(
        self,
        name: str,
        kind: str | SourceKind,
        location: str | None,
        *,
        branch: str | None = None,
        base_path: str | None = None,
        is_default: bool = False,
    ) -> Source:
        source = Source(
            name=name,
            kind=SourceKind.parse(kind),
            location=location,
            branch=branch,
            base_path=base_path or DEFAULT_BASE_PATH,
            is_default=is_default,
        )
        self.save(self.load().with_source(source))
        return source

    def remove_source(self, name: str) -> None:
        document = self.load()
        self.save(document.without_source(name))

    def list_sources(self) -> List[Source]:
        return list(self.load().sources)

    def get_source(self, name: str) -> Source:
        source = self.load().find(name)
        if source is None:
            raise SourceNotFoundError(f"Source '{name}' not found")
        return source


def select_sources(document: ConfigDocument, name: str | None) -> List[Source]:
    """Return every configured source, or only ``name`` when given."""

    if name is None:
        return list(document.sources)
    source = document.find(name)
    if source is None:
        raise SourceNotFoundError(f"Source '{name}' not found")
    return [source]


__all__ = ["CONFIG_FILENAME", "JsonConfigStore", "select_sources"]
