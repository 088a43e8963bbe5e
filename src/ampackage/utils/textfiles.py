"""UTF-8 template text I/O without newline translation.

``Path.read_text``/``write_text`` fold ``\\r\\n`` and ``\\r`` into ``\\n``;
templates must reach the project exactly as stored in the source.
"""

from __future__ import annotations

from pathlib import Path


def read_exact(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as fh:
        return fh.read()


def write_exact(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


__all__ = ["read_exact", "write_exact"]
