"""Error taxonomy shared by every ampackage layer."""

from __future__ import annotations


class AmpackageError(RuntimeError):
    """Base class for failures the CLI reports to the user."""


class TemplateNotFoundError(AmpackageError):
    """A requested template is absent from a source."""


class TemplateResolutionError(TemplateNotFoundError):
    """No configured source could supply a template."""

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = list(failures)
        lines = [f"{name}: {message}" for name, message in self.failures]
        super().__init__("\n".join(["Template not found in any source:", *lines]))


class TemplateNameError(AmpackageError, ValueError):
    """Template kind or name is malformed."""


class SourceConfigError(AmpackageError):
    """A source is missing from configuration or configured incorrectly."""


class SourceNotFoundError(SourceConfigError):
    """A referenced source name is not configured."""


class TransportError(AmpackageError):
    """HTTP, filesystem or Git transport failure."""


class GitCommandError(TransportError):
    """A git subprocess exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"`{' '.join(command)}` failed: {detail}")


class SourceNotSupportedError(AmpackageError):
    """The operation is not implemented for the source kind."""


__all__ = [
    "AmpackageError",
    "GitCommandError",
    "SourceConfigError",
    "SourceNotFoundError",
    "SourceNotSupportedError",
    "TemplateNameError",
    "TemplateNotFoundError",
    "TemplateResolutionError",
    "TransportError",
]
