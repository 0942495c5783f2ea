"""Terminal rendering of route listings and command confirmations.

The ``format_*`` functions are pure and return plain lines; the ``print_*``
functions write them through a rich console, colouring only the ``ok:``
prefix so that column alignment never depends on markup.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape

from .flatten import (
    ACTION_HEADER,
    API_NAME_HEADER,
    URL_HEADER,
    VERB_HEADER,
    column_widths,
    compose_action_name,
    flatten_collection,
    iter_matching_operations,
)
from .models import FlatRoute, ProtocolVersion, RetApi, RouteFilter, RouteSpec

VERB_WIDTH = 7

console = Console()
OK = "[green]ok:[/green]"


def format_full_blocks(routes: Iterable[FlatRoute]) -> list[str]:
    """One labelled block per route."""
    lines: list[str] = []
    for route in routes:
        lines.extend(
            [
                f"Action: {route.action_name}",
                f"  API Name: {route.api_name}",
                f"  Base path: {route.base_path}",
                f"  Path: {route.rel_path}",
                f"  Verb: {route.verb}",
                f"  URL: {route.full_url}",
            ]
        )
    return lines


def format_row(
    action: str, verb: str, api_name: str, url: str, action_width: int, api_name_width: int
) -> str:
    """One left-justified table row; action and API name are cut to their widths."""
    return (
        f"{action[:action_width]:<{action_width}} "
        f"{verb:<{VERB_WIDTH}} "
        f"{api_name[:api_name_width]:<{api_name_width}}  "
        f"{url}"
    )


def format_table(routes: Iterable[FlatRoute], action_width: int, api_name_width: int) -> list[str]:
    """Header row followed by one row per route. The header is always present."""
    lines = [format_row(ACTION_HEADER, VERB_HEADER, API_NAME_HEADER, URL_HEADER, action_width, api_name_width)]
    for route in routes:
        lines.append(
            format_row(
                route.action_name, route.verb, route.api_name, route.full_url, action_width, api_name_width
            )
        )
    return lines


def format_listing(
    apis: list[RetApi], route_filter: RouteFilter, version: ProtocolVersion, full: bool
) -> list[str]:
    """Render a get or list response in full or tabular mode."""
    routes = flatten_collection(apis, route_filter, version)
    if full:
        return format_full_blocks(routes)
    action_width, api_name_width = column_widths(apis, route_filter, version)
    return format_table(routes, action_width, api_name_width)


def format_created(spec: RouteSpec, created: RetApi, version: ProtocolVersion) -> list[tuple[str, str]]:
    """``(route, url)`` pairs describing what a create call registered."""
    base_url = created.base_url.rstrip("/")
    if not spec.is_swagger:
        action = spec.action
        route = (
            f"{spec.base_path.rstrip('/')}{spec.rel_path} {spec.verb} "
            f"for action /{action.namespace}/{action.name}"
        )
        return [(route, f"{base_url}{spec.rel_path}")]

    # V1 reports the bare path and action name; V2 the full path and qualified name.
    document = created.swagger
    base_path = (document.base_path or "").rstrip("/") if document else ""
    pairs = []
    for path, verb, operation in iter_matching_operations(document, RouteFilter()):
        if version is ProtocolVersion.V2:
            route = f"{base_path}{path} {verb} for action {compose_action_name(operation.extension, version)}"
        else:
            name = operation.extension.action_name if operation.extension else ""
            route = f"{path} {verb} for action {name}"
        pairs.append((route, f"{base_url}{path}"))
    return pairs


def format_deleted(base_path: str, rel_path: str | None = None, verb: str | None = None) -> str:
    if rel_path and verb:
        return f"deleted {rel_path} {verb} from {base_path}"
    if rel_path:
        return f"deleted {rel_path} from {base_path}"
    return f"deleted API {base_path}"


def print_lines(lines: Iterable[str], out: Console | None = None) -> None:
    out = out or console
    for line in lines:
        out.print(line, markup=False, highlight=False, soft_wrap=True)


def print_listing(
    apis: list[RetApi],
    route_filter: RouteFilter,
    version: ProtocolVersion,
    full: bool,
    out: Console | None = None,
) -> None:
    out = out or console
    out.print(f"{OK} APIs", highlight=False)
    print_lines(format_listing(apis, route_filter, version, full), out)


def print_created(
    spec: RouteSpec, created: RetApi, version: ProtocolVersion, out: Console | None = None
) -> None:
    out = out or console
    for route, url in format_created(spec, created, version):
        out.print(f"{OK} created API {escape(route)}", highlight=False, soft_wrap=True)
        print_lines([url], out)


def print_deleted(
    base_path: str, rel_path: str | None = None, verb: str | None = None, out: Console | None = None
) -> None:
    out = out or console
    out.print(f"{OK} {escape(format_deleted(base_path, rel_path, verb))}", highlight=False, soft_wrap=True)


def print_json(data: Any, out: Console | None = None) -> None:
    (out or console).print_json(data=data, indent=4)
