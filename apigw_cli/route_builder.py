"""Build a route-registration request from command arguments or Swagger.

Positional arguments take one of two shapes::

    API_PATH API_VERB ACTION                      (base path defaults to /)
    BASE_PATH|API_NAME API_PATH API_VERB ACTION

With four arguments, a first argument beginning with ``/`` is a base path;
anything else is taken as an API name. A name is sent both as the API name
and in the base-path slot, where the gateway resolves it to the named API's
base path; the request then carries no record id since name-addressed APIs
have none.

The backend URL of the route depends on the protocol version: V1 routes call
the action through the authenticated actions API with POST, V2 routes call
the action's web endpoint with the route's own verb, which requires the
action to be a web action.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from .config import WhiskConfig
from .exceptions import ConfigError, UsageError
from .logging_config import get_logger
from .models import ApiAction, ProtocolVersion, RouteSpec, SwaggerDocument
from .qualified_name import QualifiedName, parse_qualified_name
from .validation import check_arg_count, check_rel_path, check_verb, has_leading_slash

logger = get_logger(__name__)

CREATE_HINT = (
    "Specify a swagger file or specify an API base path with an API path, "
    "an API verb, and an action name."
)

DEFAULT_PACKAGE = "default"

# Returns (is_web_action, error_message).
WebActionCheck = Callable[[QualifiedName], tuple[bool, str]]


def backend_url(host: str, qname: QualifiedName, version: ProtocolVersion) -> str:
    """URL the gateway forwards route traffic to."""
    if version is ProtocolVersion.V1:
        return f"https://{host}/api/v1/namespaces/{qname.namespace}/actions/{qname.entity_name}"
    package = qname.package_name or DEFAULT_PACKAGE
    return f"https://{host}/api/v1/web/{qname.namespace}/{package}/{qname.entity_name}.http"


def backend_method(verb: str, version: ProtocolVersion) -> str:
    """HTTP method the gateway uses to call the backend."""
    return "POST" if version is ProtocolVersion.V1 else verb


def resolve_action(name: str, default_namespace: str) -> QualifiedName:
    """Resolve the ACTION argument.

    Raises:
        UsageError: If the name cannot be parsed or has no entity name.
    """
    try:
        qname = parse_qualified_name(name, default_namespace)
    except UsageError as e:
        logger.debug("Qualified name parse failed", extra={"action": name, "error": str(e)})
        raise UsageError(f"'{name}' is not a valid action name: {e}") from e
    if not qname.entity_name:
        logger.debug("Action name is invalid", extra={"action": name})
        raise UsageError(f"'{name}' is not a valid action name.")
    return qname


def build_route_spec(
    args: list[str],
    api_name: str | None,
    version: ProtocolVersion,
    config: WhiskConfig,
    web_action_check: WebActionCheck | None = None,
) -> RouteSpec:
    """Build a RouteSpec from positional ``create`` arguments.

    Args:
        args: ``[BASE_PATH|API_NAME] API_PATH API_VERB ACTION``.
        api_name: Value of ``--apiname``, if given.
        version: Protocol version selecting the backend URL rules.
        config: Connection settings (host, namespace, auth key).
        web_action_check: Predicate confirming the action is a web action;
            required for V2.

    Returns:
        The route-registration request.

    Raises:
        UsageError: On a bad argument count, path, verb or action name, a
            doubly specified API name, or (V2) an action that is not a web
            action.
    """
    check_arg_count(args, 3, 4, "Api create", CREATE_HINT)

    base_path = "/"
    base_path_is_api_name = False
    if len(args) == 4:
        if not has_leading_slash(args[0]):
            logger.debug(
                "Treating argument as an API name; it does not begin with '/'",
                extra={"api_name": args[0]},
            )
            base_path_is_api_name = True
        base_path = args[0]
        args = args[1:]

    rel_path = check_rel_path(args[0])
    verb = check_verb(args[1])
    qname = resolve_action(args[2], config.namespace)

    if api_name and base_path_is_api_name:
        logger.debug(
            "API name given as argument and as flag",
            extra={"api_name": base_path, "flag": api_name},
        )
        raise UsageError("An API name can only be specified once.")
    if base_path_is_api_name:
        api_name = base_path

    if version is ProtocolVersion.V2:
        if web_action_check is None:
            raise UsageError(f"Unable to verify that '{qname}' is a web action.")
        ok, message = web_action_check(qname)
        if not ok:
            logger.debug("Action is not a web action", extra={"action": str(qname)})
            raise UsageError(message)

    action = ApiAction(
        name=qname.entity_name,
        namespace=qname.namespace,
        backend_method=backend_method(verb, version),
        backend_url=backend_url(config.host, qname, version),
        auth=config.auth_key,
    )
    spec = RouteSpec(
        namespace=config.namespace,
        api_name=api_name or None,
        base_path=base_path,
        rel_path=rel_path,
        verb=verb,
        action=action,
        record_id=None if base_path_is_api_name else f"API:{config.namespace}:{base_path}",
    )
    logger.debug(
        "Parsed route spec",
        extra={"route": spec.model_dump(exclude={"action": {"auth"}}, exclude_none=True)},
    )
    return spec


def parse_swagger(text: str, source: str) -> SwaggerDocument:
    """Parse and structurally validate a Swagger document.

    Raises:
        ConfigError: If the text is not JSON, lacks ``basePath``, ``swagger``,
            ``info`` or ``paths``, or its base path has no leading slash.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Swagger JSON parse failed", extra={"source": source})
        raise ConfigError(f"Error parsing swagger file '{source}': {e}") from e

    invalid = ConfigError("Swagger file is invalid (missing basePath, info, paths, or swagger fields)")
    if not isinstance(raw, dict):
        raise invalid
    try:
        document = SwaggerDocument.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Error parsing swagger file '{source}': {e}") from e

    if not document.base_path or not document.swagger or document.info is None or not document.paths:
        logger.debug("Swagger file is invalid", extra={"source": source})
        raise invalid
    if not has_leading_slash(document.base_path):
        logger.debug("Swagger basePath is invalid", extra={"base_path": document.base_path})
        raise ConfigError("Swagger file basePath must start with a leading slash (/)")
    return document


def load_swagger_route_spec(source: str | Path, namespace: str) -> RouteSpec:
    """Build a RouteSpec carrying a Swagger file verbatim.

    Raises:
        ConfigError: If no file is given, it cannot be read, or it is not a
            valid Swagger document.
    """
    if not source:
        raise ConfigError("A configuration file was not specified.")
    try:
        text = Path(source).read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Swagger file read failed", extra={"source": str(source)})
        raise ConfigError(f"Error reading swagger file '{source}': {e}") from e

    document = parse_swagger(text, str(source))
    logger.debug("Parsed swagger file", extra={"base_path": document.base_path})
    return RouteSpec(namespace=namespace, swagger=text)


def build_create_request(
    args: list[str],
    api_name: str | None,
    config_file: str | None,
    version: ProtocolVersion,
    config: WhiskConfig,
    web_action_check: WebActionCheck | None = None,
) -> RouteSpec:
    """Choose between argument-built and Swagger-built requests for ``create``.

    Raises:
        UsageError: Without arguments and without a configuration file.
        ConfigError: If the Swagger file cannot be loaded.
    """
    if not args and not config_file:
        logger.debug("No swagger file and no arguments")
        raise UsageError(f"Invalid argument(s). {CREATE_HINT}")
    if not args:
        try:
            return load_swagger_route_spec(config_file, config.namespace)
        except ConfigError as e:
            raise ConfigError(f"Unable to parse swagger file: {e}", e.details) from e
    return build_route_spec(args, api_name, version, config, web_action_check)
