"""Template kinds and references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import TemplateNameError

TEMPLATE_SUFFIXES = (".ts", ".tsx")
_FORBIDDEN = ("/", "\\")


class TemplateKind(str, Enum):
    COMPONENT = "component"
    HOOK = "hook"
    UTIL = "util"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @property
    def extension(self) -> str:
        return ".tsx" if self is TemplateKind.COMPONENT else ".ts"

    @classmethod
    def parse(cls, value: "str | TemplateKind") -> "TemplateKind":
        if isinstance(value, TemplateKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(kind.value for kind in cls)
            raise TemplateNameError(f"unknown template kind '{value}' (expected one of: {choices})") from exc


def validate_template_name(name: str) -> str:
    if not name or not name.strip():
        raise TemplateNameError("template name cannot be empty")
    if any(char in name for char in _FORBIDDEN) or ".." in name:
        raise TemplateNameError(f"template name '{name}' must not contain path separators")
    return name


@dataclass(frozen=True)
class TemplateRef:
    """A (kind, name) pair; together with a source name it fixes a storage location."""

    kind: TemplateKind
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TemplateKind.parse(self.kind))
        validate_template_name(self.name)

    @property
    def filename(self) -> str:
        return f"{self.name}{self.kind.extension}"

    def relative_path(self) -> Path:
        return Path(self.kind.plural) / self.filename

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.name}"


def template_names_in(directory: Path) -> list[str]:
    """Return stems of template files directly under ``directory``."""

    if not directory.is_dir():
        return []
    return sorted(
        entry.stem
        for entry in directory.iterdir()
        if entry.is_file() and entry.name.endswith(TEMPLATE_SUFFIXES)
    )
