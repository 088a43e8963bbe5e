"""Runtime settings for the ampackage CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from ampackage import __version__

HOME_ENV = "AMPACKAGE_HOME"


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    cache_dir: Path
    repos_dir: Path
    log_dir: Path
    templates_root: Path
    cli_version: str = __version__

    def repo_dir_for(self, source_name: str) -> Path:
        return self.repos_dir / source_name


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ampackage"


def _bundled_templates_root() -> Path:
    return Path(str(resources.files("ampackage.resources")))


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        cache_dir=base / "cache",
        repos_dir=base / "repos",
        log_dir=base / "logs",
        templates_root=_bundled_templates_root(),
    )


SETTINGS = load_settings()
