"""ampackage: copy component, hook and util templates into projects."""

__version__ = "1.0.0"

__all__ = ["__version__"]
