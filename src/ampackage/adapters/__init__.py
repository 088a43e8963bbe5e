"""Filesystem, HTTP and Git adapters for ampackage ports."""
