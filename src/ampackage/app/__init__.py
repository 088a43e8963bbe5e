"""Application services for resolving, scaffolding and publishing templates."""

from .publish import PublishService, PushOptions, PushResult, PushStatus
from .resolver import FetchResult, TemplateListing, TemplateResolver
from .scaffold import AddOutcome, AddStatus, ScaffoldService, default_push_target, read_project_file

__all__ = [
    "AddOutcome",
    "AddStatus",
    "FetchResult",
    "PublishService",
    "PushOptions",
    "PushResult",
    "PushStatus",
    "ScaffoldService",
    "TemplateListing",
    "TemplateResolver",
    "default_push_target",
    "read_project_file",
]
