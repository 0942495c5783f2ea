"""Flatten gateway Swagger documents into per-route listing records.

A registered API is a Swagger document whose ``paths`` map each relative
path to a verb-to-operation mapping. Listing walks that nesting, keeps the
operations matching the requested relative path and verb, and emits one
:class:`FlatRoute` per operation.

The row builder and both width calculators share
:func:`iter_matching_operations` and :func:`compose_action_name`, so a
column is never computed narrower than the rows printed into it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .logging_config import get_logger
from .models import (
    ActionExtension,
    FlatRoute,
    ProtocolVersion,
    RetApi,
    RouteFilter,
    SwaggerDocument,
    SwaggerOperation,
)

logger = get_logger(__name__)

ACTION_HEADER = "Action"
VERB_HEADER = "Verb"
API_NAME_HEADER = "API Name"
URL_HEADER = "URL"

MAX_ACTION_NAME_WIDTH = 40
MAX_API_NAME_WIDTH = 30


def compose_action_name(extension: ActionExtension | None, version: ProtocolVersion) -> str:
    """Fully qualified action name of an operation.

    V1 names are always ``/namespace/action``; V2 names include the package
    segment when the operation's action lives in a package.
    """
    if extension is None:
        return ""
    if version is ProtocolVersion.V2 and extension.package:
        return f"/{extension.namespace}/{extension.package}/{extension.action_name}"
    return f"/{extension.namespace}/{extension.action_name}"


def matches(path: str, verb: str, route_filter: RouteFilter) -> bool:
    """Whether an operation passes the filter.

    The relative path must match exactly; the verb ignoring case. Empty
    filter fields match everything.
    """
    if route_filter.rel_path and path != route_filter.rel_path:
        return False
    if route_filter.verb and verb.lower() != route_filter.verb.lower():
        return False
    return True


def iter_matching_operations(
    document: SwaggerDocument | None, route_filter: RouteFilter
) -> Iterator[tuple[str, str, SwaggerOperation]]:
    """Yield ``(path, verb, operation)`` for every operation passing the filter."""
    if document is None:
        return
    for path, operations in document.paths.items():
        logger.debug("Comparing api relpath", extra={"rel_path": path})
        for verb, operation in operations.items():
            if matches(path, verb, route_filter):
                logger.debug("Operation matches", extra={"rel_path": path, "verb": verb})
                yield path, verb, operation


def flatten(
    document: SwaggerDocument | None,
    route_filter: RouteFilter,
    version: ProtocolVersion,
    base_url: str = "",
) -> list[FlatRoute]:
    """Flatten one Swagger document into listing records.

    Args:
        document: The registered API's Swagger document.
        route_filter: Relative path and verb restriction.
        version: Protocol version selecting action-name composition.
        base_url: Gateway URL the relative paths are served under.

    Returns:
        One record per matching operation.
    """
    if document is None:
        return []
    base_url = base_url.rstrip("/")
    return [
        FlatRoute(
            action_name=compose_action_name(operation.extension, version),
            verb=verb,
            rel_path=path,
            base_path=document.base_path or "",
            api_name=document.title,
            full_url=base_url + path,
        )
        for path, verb, operation in iter_matching_operations(document, route_filter)
    ]


def flatten_api(api: RetApi, route_filter: RouteFilter, version: ProtocolVersion) -> list[FlatRoute]:
    return flatten(api.swagger, route_filter, version, api.base_url)


def flatten_collection(
    apis: Iterable[RetApi], route_filter: RouteFilter, version: ProtocolVersion
) -> list[FlatRoute]:
    """Flatten every API of a get or list response, in response order."""
    routes: list[FlatRoute] = []
    for api in apis:
        routes.extend(flatten_api(api, route_filter, version))
    return routes


def max_action_name_width(
    apis: Iterable[RetApi], route_filter: RouteFilter, version: ProtocolVersion
) -> int:
    """Length of the longest matching action name (0 when nothing matches)."""
    width = 0
    for api in apis:
        for _, _, operation in iter_matching_operations(api.swagger, route_filter):
            width = max(width, len(compose_action_name(operation.extension, version)))
    return width


def max_api_name_width(
    apis: Iterable[RetApi], route_filter: RouteFilter, version: ProtocolVersion
) -> int:
    """Length of the longest API name owning a matching operation."""
    width = 0
    for api in apis:
        title = api.swagger.title if api.swagger else ""
        for _ in iter_matching_operations(api.swagger, route_filter):
            width = max(width, len(title))
    return width


def column_widths(
    apis: Iterable[RetApi], route_filter: RouteFilter, version: ProtocolVersion
) -> tuple[int, int]:
    """Display widths of the action and API-name columns.

    Each is at least as wide as its header and at most 40 (action) or
    30 (API name) characters.
    """
    apis = list(apis)
    action_width = min(
        MAX_ACTION_NAME_WIDTH,
        max(len(ACTION_HEADER), max_action_name_width(apis, route_filter, version)),
    )
    api_name_width = min(
        MAX_API_NAME_WIDTH,
        max(len(API_NAME_HEADER), max_api_name_width(apis, route_filter, version)),
    )
    return action_width, api_name_width
