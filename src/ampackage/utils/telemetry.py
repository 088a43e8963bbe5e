"""Local JSON-lines log of what ampackage commands did (opt-out).

Every record is one of a closed set of command events. Each event has its
own builder below so call sites never hand-assemble payloads, and the
packaged ``telemetry.schema.json`` pins the payload keys per event name.
"""

from __future__ import annotations

import json
import os
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

import jsonschema

from ampackage.resources import load_schema
from ampackage.settings import RuntimeSettings

LOG_FILENAME = "telemetry.jsonl"
OPT_OUT_ENV = "AMPACKAGE_TELEMETRY"

_OFF = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CommandEvent:
    event: str
    payload: Dict[str, Any] = field(default_factory=dict)
    level: str = "info"
    status: str | None = None

    def to_record(self, ts: float) -> Dict[str, Any]:
        record: Dict[str, Any] = {"ts": ts, "event": self.event, "level": self.level, "payload": dict(self.payload)}
        if self.status is not None:
            record["status"] = self.status
        return record


def templates_listed(sources: Sequence[str], count: int) -> CommandEvent:
    return CommandEvent("templates.list", {"sources": list(sources), "count": count})


def listing_failed(source: str, error: str) -> CommandEvent:
    return CommandEvent("templates.list", {"source": source, "error": error}, level="warn", status="source_failed")


def templates_added(kind: str, names: Sequence[str], counts: Mapping[str, int]) -> CommandEvent:
    failed = counts.get("failed", 0)
    return CommandEvent(
        "templates.add",
        {"kind": kind, "names": list(names), **counts},
        level="error" if failed else "info",
    )


def template_pushed(kind: str, name: str, source: str, branch: str | None, status: str) -> CommandEvent:
    return CommandEvent(
        "templates.push",
        {"kind": kind, "name": name, "source": source, "branch": branch},
        status=status,
    )


def push_failed(kind: str, name: str, error: str) -> CommandEvent:
    return CommandEvent("templates.push", {"kind": kind, "name": name, "error": error}, level="error", status="failed")


def source_added(name: str, kind: str) -> CommandEvent:
    return CommandEvent("source.add", {"name": name, "type": kind})


def source_removed(name: str) -> CommandEvent:
    return CommandEvent("source.remove", {"name": name})


def cache_cleared(source: str | None, removed: int) -> CommandEvent:
    return CommandEvent("cache.clear", {"source": source, "removed": removed})


def config_fallback(path: str, error: str) -> CommandEvent:
    return CommandEvent("config.load", {"path": path, "error": error}, level="warn", status="defaults")


def telemetry_enabled() -> bool:
    return os.getenv(OPT_OUT_ENV, "1").strip().lower() not in _OFF


@lru_cache(maxsize=None)
def _validator() -> jsonschema.Draft202012Validator:
    return jsonschema.Draft202012Validator(load_schema("telemetry.schema.json"))


def record(settings: RuntimeSettings, event: CommandEvent, *, clock: Callable[[], float] = time.time) -> None:
    """Append ``event`` to the log; a record the schema rejects is never written."""

    if not telemetry_enabled():
        return
    entry = event.to_record(clock())
    _validator().validate(entry)
    log_path = settings.log_dir / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry, ensure_ascii=False) + "\n")


def read_events(settings: RuntimeSettings, *, recent: int = 0) -> List[Dict[str, Any]]:
    """Return logged records oldest first, only the last ``recent`` when positive.

    Lines that are not JSON objects (a torn final write, manual edits) are skipped.
    """

    log_path = settings.log_dir / LOG_FILENAME
    if not log_path.exists():
        return []
    window: deque[Dict[str, Any]] = deque(maxlen=recent if recent > 0 else None)
    with log_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                window.append(entry)
    return list(window)


def summarize(events: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    by_event: Counter[str] = Counter()
    by_level: Counter[str] = Counter()
    for entry in events:
        by_event[str(entry.get("event", "unknown"))] += 1
        by_level[str(entry.get("level", "info"))] += 1
    return {
        "total": sum(by_event.values()),
        "by_event": dict(by_event),
        "by_level": dict(by_level),
    }


__all__ = [
    "CommandEvent",
    "cache_cleared",
    "config_fallback",
    "listing_failed",
    "push_failed",
    "read_events",
    "record",
    "source_added",
    "source_removed",
    "summarize",
    "telemetry_enabled",
    "template_pushed",
    "templates_added",
    "templates_listed",
]
