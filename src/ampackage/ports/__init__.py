"""Port definitions consumed by ampackage services."""

from .fetcher import TemplateFetcher
from .git import GitClient

__all__ = ["GitClient", "TemplateFetcher"]
