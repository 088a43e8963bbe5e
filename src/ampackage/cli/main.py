#!/usr/bin/env python3
"""Entry point for the ampackage CLI."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent
from typing import Any, Callable

import requests

from ampackage import __version__
from ampackage.adapters.cache import TemplateCache
from ampackage.adapters.config_store import JsonConfigStore, select_sources
from ampackage.adapters.git_cli import SubprocessGitClient
from ampackage.app import (
    AddStatus,
    PublishService,
    PushOptions,
    PushStatus,
    ScaffoldService,
    TemplateResolver,
    default_push_target,
    read_project_file,
)
from ampackage.app.scaffold import DEFAULT_DEST
from ampackage.domain.errors import AmpackageError
from ampackage.domain.source import ConfigDocument, SourceKind
from ampackage.domain.template import TemplateKind
from ampackage.ports.git import GitClient
from ampackage.settings import SETTINGS
from ampackage.utils import telemetry

KIND_CHOICES = tuple(kind.value for kind in TemplateKind)
SOURCE_KIND_CHOICES = ("local", "github", "npm", "git", "registry")

HELP_OVERVIEW = dedent(
    """
    Copy components, hooks and utils from configured template sources.

    Examples:
      - ampackage list
      - ampackage add component Button Modal --dest src
      - ampackage push hook useAuth --source team --pr
      - ampackage source add team github https://github.com/acme/templates.git
    """
)

GIT_CLIENT_FACTORY: Callable[[], GitClient] = SubprocessGitClient
HTTP_SESSION: requests.Session | None = None


@dataclass
class Services:
    store: JsonConfigStore
    document: ConfigDocument
    cache: TemplateCache
    resolver: TemplateResolver
    scaffold: ScaffoldService
    publisher: PublishService


def _config_store() -> JsonConfigStore:
    return JsonConfigStore(SETTINGS, cwd=Path.cwd(), home=Path.home())


def _build_services() -> Services:
    store = _config_store()
    document = store.load()
    cache = TemplateCache(SETTINGS.cache_dir)
    resolver = TemplateResolver(SETTINGS, cache, document.cache, session=HTTP_SESSION)
    return Services(
        store=store,
        document=document,
        cache=cache,
        resolver=resolver,
        scaffold=ScaffoldService(resolver),
        publisher=PublishService(SETTINGS, GIT_CLIENT_FACTORY()),
    )


def _list_cmd(args: argparse.Namespace) -> int:
    services = _build_services()
    try:
        sources = select_sources(services.document, getattr(args, "source", None))
    except AmpackageError as exc:
        print(f"list error: {exc}", file=sys.stderr)
        return 1

    listing = services.resolver.list_all_templates(sources)
    for warning in listing.warnings:
        print(f"ampackage: warning: {warning}", file=sys.stderr)
    payload = {
        "templates": {kind.value: names for kind, names in listing.templates.items()},
        "sources": [source.name for source in sources],
        "warnings": listing.warnings,
    }
    total = sum(len(names) for names in listing.templates.values())
    telemetry.record(SETTINGS, telemetry.templates_listed(payload["sources"], total))
    if getattr(args, "json", False):
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print("Available templates:")
    for kind, names in listing.templates.items():
        if not names:
            continue
        print(f"{kind.value}:")
        for name in names:
            print(f"  - {name}")
    if len(sources) > 1:
        print(f"Sources: {', '.join(payload['sources'])}")
    return 0


def _add_cmd(args: argparse.Namespace) -> int:
    services = _build_services()
    try:
        sources = select_sources(services.document, getattr(args, "source", None))
    except AmpackageError as exc:
        print(f"add error: {exc}", file=sys.stderr)
        return 1

    outcomes = services.scaffold.add(
        sources,
        args.kind,
        args.names,
        Path.cwd(),
        dest=args.dest,
        overwrite=bool(args.overwrite),
    )
    for outcome in outcomes:
        label = f"{outcome.kind.value}/{outcome.name}"
        if outcome.status is AddStatus.ADDED and outcome.source is not None:
            print(f"Added {label} -> {outcome.target} (from {outcome.source.name})")
        elif outcome.status is AddStatus.EXISTS:
            print(f"File already exists: {outcome.target} (use --overwrite to replace it)")
        else:
            print(f"add error: {label}: {outcome.error}", file=sys.stderr)

    counts = {status.value: 0 for status in AddStatus}
    for outcome in outcomes:
        counts[outcome.status.value] += 1
    telemetry.record(SETTINGS, telemetry.templates_added(args.kind, args.names, counts))
    return 1 if counts[AddStatus.FAILED.value] else 0


def _push_cmd(args: argparse.Namespace) -> int:
    services = _build_services()
    try:
        if args.source:
            target = select_sources(services.document, args.source)[0]
        else:
            target = default_push_target(services.document.sources)
            if target is None:
                print("push error: no sources configured", file=sys.stderr)
                return 1
        content = read_project_file(Path.cwd(), args.kind, args.name)
        result = services.publisher.push(
            target,
            args.kind,
            args.name,
            content,
            PushOptions(overwrite=bool(args.overwrite), review_branch=bool(args.pr), message=args.message),
        )
    except AmpackageError as exc:
        print(f"push error: {exc}", file=sys.stderr)
        telemetry.record(SETTINGS, telemetry.push_failed(args.kind, args.name, str(exc)))
        return 1

    label = f"{args.kind}/{args.name}"
    if result.status is PushStatus.ALREADY_EXISTS:
        print(f"Template already exists: {result.path} (use --overwrite to replace it)")
    elif result.status is PushStatus.NOTHING_TO_COMMIT:
        print(f"No changes to commit for {label} in {target.name}")
    elif result.status is PushStatus.BRANCH_PUSHED:
        print(f"Pushed {label} to branch {result.branch} of {target.name}")
        if result.compare_url:
            print(f"Open a pull request at: {result.compare_url}")
    elif result.status is PushStatus.PUSHED:
        print(f"Pushed {label} to {target.name} ({result.branch})")
    else:
        print(f"Pushed {label} -> {result.path}")
    telemetry.record(
        SETTINGS,
        telemetry.template_pushed(args.kind, args.name, target.name, result.branch, result.status.value),
    )
    return 0


def _source_payload(document: ConfigDocument) -> list[dict[str, Any]]:
    return [source.to_dict() for source in document.sources]


def _source_cmd(args: argparse.Namespace) -> int:
    store = _config_store()
    command = getattr(args, "source_command", "list")

    if command == "add":
        kind = SourceKind.parse(args.kind)
        location = args.location
        if kind is SourceKind.LOCAL:
            location = str(Path(location).expanduser().resolve())
        try:
            source = store.add_source(
                args.name,
                kind,
                location,
                branch=args.branch,
                base_path=args.base_path,
                is_default=bool(args.default),
            )
        except (AmpackageError, OSError) as exc:
            print(f"source error: {exc}", file=sys.stderr)
            return 1
        telemetry.record(SETTINGS, telemetry.source_added(source.name, source.kind.value))
        print(f"Added source: {source.name} ({source.kind.value})")
        print(f"  URL: {source.location}")
        if source.kind is SourceKind.GIT:
            print(f"  Branch: {source.effective_branch}")
        print(f"  Path: {source.base_path}")
        return 0

    if command == "remove":
        try:
            store.remove_source(args.name)
        except (AmpackageError, OSError) as exc:
            print(f"source error: {exc}", file=sys.stderr)
            return 1
        telemetry.record(SETTINGS, telemetry.source_removed(args.name))
        print(f"Removed source: {args.name}")
        return 0

    if command == "list":
        document = store.load()
        payload = _source_payload(document)
        if getattr(args, "json", False):
            print(json.dumps(payload, ensure_ascii=False, indent=2))
            return 0
        if not payload:
            print("No sources configured")
            return 0
        print("Configured sources:")
        for index, source in enumerate(document.sources, start=1):
            print(f"{index}. {source.name} ({source.kind.value})")
            if source.location:
                print(f"   URL: {source.location}")
            print(f"   Path: {source.base_path}")
            if source.branch:
                print(f"   Branch: {source.branch}")
            if source.is_default:
                print("   Default: yes")
        return 0

    print("Unsupported source command", file=sys.stderr)
    return 2


def _cache_cmd(args: argparse.Namespace) -> int:
    cache = TemplateCache(SETTINGS.cache_dir)
    command = getattr(args, "cache_command", "list")
    source_name = getattr(args, "source", None)

    if command == "list":
        entries = cache.entries(source_name)
        payload = {
            "cache_dir": str(cache.cache_dir),
            "entries": [
                {
                    "source": entry.source_name,
                    "kind": entry.kind.value,
                    "name": entry.name,
                    "path": str(entry.path),
                    "size": entry.size_bytes,
                    "age_seconds": round(entry.age_seconds, 1),
                }
                for entry in entries
            ],
        }
        if getattr(args, "json", False):
            print(json.dumps(payload, ensure_ascii=False, indent=2))
            return 0
        if not entries:
            print("No cached templates.")
            return 0
        print(f"Cache directory: {cache.cache_dir}")
        for entry in entries:
            print(f"- {entry.source_name}: {entry.kind.value}/{entry.name} ({entry.size_bytes} bytes, {entry.age_seconds:.0f}s old)")
        return 0

    if command == "clear":
        try:
            removed = cache.clear(source_name)
        except OSError as exc:
            print(f"cache error: {exc}", file=sys.stderr)
            return 1
        telemetry.record(SETTINGS, telemetry.cache_cleared(source_name, removed))
        print(f"Removed {removed} cached template(s)")
        return 0

    print("Unsupported cache command", file=sys.stderr)
    return 2


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        events = telemetry.read_events(SETTINGS, recent=getattr(args, "recent", 0))
        print(json.dumps(telemetry.summarize(events), indent=2, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ampackage",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"ampackage {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List available templates from all sources")
    list_cmd.add_argument("--source", help="List templates from a specific source only")
    list_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    list_cmd.set_defaults(func=_list_cmd)

    add_cmd = sub.add_parser("add", help="Add template(s) to your project")
    add_cmd.add_argument("kind", choices=KIND_CHOICES, help="Template kind")
    add_cmd.add_argument("names", nargs="+", help="Template name(s) to add")
    add_cmd.add_argument("--dest", default=DEFAULT_DEST, help=f"Destination directory (default: {DEFAULT_DEST})")
    add_cmd.add_argument("--overwrite", action="store_true", help="Overwrite existing files")
    add_cmd.add_argument("--source", help="Fetch from a specific source only")
    add_cmd.set_defaults(func=_add_cmd)

    push_cmd = sub.add_parser("push", help="Push a project file to a template source")
    push_cmd.add_argument("kind", choices=KIND_CHOICES, help="Template kind")
    push_cmd.add_argument("name", help="Template name")
    push_cmd.add_argument("--overwrite", action="store_true", help="Overwrite an existing local template")
    push_cmd.add_argument("--source", help="Target source (default: first local source)")
    push_cmd.add_argument("--pr", action="store_true", help="Push to a new review branch instead of the source branch")
    push_cmd.add_argument("--message", help="Commit message for Git sources")
    push_cmd.set_defaults(func=_push_cmd)

    source_cmd = sub.add_parser("source", help="Manage template sources")
    source_sub = source_cmd.add_subparsers(dest="source_command", required=True)

    source_add = source_sub.add_parser("add", help="Add or replace a template source")
    source_add.add_argument("name", help="Source name")
    source_add.add_argument("kind", choices=SOURCE_KIND_CHOICES, help="Source type")
    source_add.add_argument("location", help="Repository URL or directory")
    source_add.add_argument("--branch", help="Git branch (default: main)")
    source_add.add_argument("--path", dest="base_path", help="Base path within the source (default: templates)")
    source_add.add_argument("--default", action="store_true", help="Mark as default source")
    source_add.set_defaults(func=_source_cmd, source_command="add")

    source_remove = source_sub.add_parser("remove", help="Remove a template source")
    source_remove.add_argument("name", help="Source name")
    source_remove.set_defaults(func=_source_cmd, source_command="remove")

    source_list = source_sub.add_parser("list", help="List configured sources")
    source_list.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    source_list.set_defaults(func=_source_cmd, source_command="list")

    cache_cmd = sub.add_parser("cache", help="Inspect or clear the template cache")
    cache_sub = cache_cmd.add_subparsers(dest="cache_command", required=True)

    cache_list = cache_sub.add_parser("list", help="List cached templates")
    cache_list.add_argument("--source", help="Only entries of this source")
    cache_list.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    cache_list.set_defaults(func=_cache_cmd, cache_command="list")

    cache_clear = cache_sub.add_parser("clear", help="Delete cached templates")
    cache_clear.add_argument("--source", help="Only clear this source")
    cache_clear.set_defaults(func=_cache_cmd, cache_command="clear")

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)

    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.add_argument(
        "--recent",
        type=int,
        default=0,
        help="Limit aggregation to the last N telemetry events",
    )
    telemetry_report.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
