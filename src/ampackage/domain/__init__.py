"""Domain primitives for template sources."""

from .errors import (
    AmpackageError,
    GitCommandError,
    SourceConfigError,
    SourceNotFoundError,
    SourceNotSupportedError,
    TemplateNameError,
    TemplateNotFoundError,
    TemplateResolutionError,
    TransportError,
)
from .source import CacheSettings, ConfigDocument, Source, SourceKind
from .template import TemplateKind, TemplateRef

__all__ = [
    "AmpackageError",
    "CacheSettings",
    "ConfigDocument",
    "GitCommandError",
    "Source",
    "SourceConfigError",
    "SourceKind",
    "SourceNotFoundError",
    "SourceNotSupportedError",
    "TemplateKind",
    "TemplateNameError",
    "TemplateNotFoundError",
    "TemplateRef",
    "TemplateResolutionError",
    "TransportError",
]
