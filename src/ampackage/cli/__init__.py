"""Command-line interface for ampackage."""
