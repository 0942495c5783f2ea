"""Command-line interface: the ``api`` and ``api-experimental`` command groups.

Both groups expose the same four commands. ``api`` speaks the V2 gateway
protocol (web-action backends, login required); ``api-experimental`` keeps
the V1 behaviour it predates.

Example::

    $ apigw api create /hello /world get hello --apiname greeting
    $ apigw api list /hello
    $ apigw api-experimental delete /hello /world get
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape

from . import __version__
from .api_client import WhiskAPIClient
from .config import Config, WhiskConfig, load_config
from .exceptions import ApiGwError, ConfigError, NotFoundError, RemoteError
from .logging_config import get_logger, setup_logging
from .models import ApiCollection, CommandFlags, ProtocolVersion, RouteFilter
from .presenter import print_created, print_deleted, print_json, print_listing
from .route_builder import build_create_request
from .routes import RouteService, decode_response, is_web_action
from .validation import check_arg_count, check_rel_path, check_verb, has_leading_slash

logger = get_logger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)

api_app = typer.Typer(no_args_is_help=True, help="work with APIs")
app.add_typer(api_app, name="api")

api_experimental_app = typer.Typer(no_args_is_help=True, help="work with APIs (experimental)")
app.add_typer(api_experimental_app, name="api-experimental")

err_console = Console(stderr=True)


class GlobalOptions(BaseModel):
    props_file: Optional[str] = None
    apihost: Optional[str] = None
    auth_key: Optional[str] = None
    namespace: Optional[str] = None
    insecure: bool = False
    debug: bool = False
    log_json: bool = False


def make_client(config: WhiskConfig) -> WhiskAPIClient:
    """Create the transport for one command."""
    if not config.host:
        raise ConfigError("The API host is not valid: set APIHOST in the properties file or pass --apihost.")
    return WhiskAPIClient(
        host=config.host,
        auth_key=config.auth_key,
        use_https=config.base_url.startswith("https://"),
        tls_verify=config.tls_verify,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )


def _load_config(ctx: typer.Context) -> Config:
    options = ctx.obj if isinstance(ctx.obj, GlobalOptions) else GlobalOptions()
    config = load_config(
        options.props_file,
        apihost=options.apihost,
        auth_key=options.auth_key,
        namespace=options.namespace,
        tls_verify=False if options.insecure else None,
        log_level="DEBUG" if options.debug else None,
        log_json=options.log_json or None,
    )
    setup_logging(
        log_level=config.cli.log_level,
        json_format=config.cli.log_json,
        log_file=config.cli.log_file,
    )
    return config


@contextmanager
def reporting_errors(ctx: typer.Context) -> Iterator[None]:
    """Report an ApiGwError on stderr and exit with its exit code."""
    try:
        yield
    except ApiGwError as e:
        logger.debug("Command failed", extra={"error_type": type(e).__name__, "exit_code": e.exit_code})
        err_console.print(f"[red]error:[/red] {escape(e.message)}", highlight=False, soft_wrap=True)
        if e.display_usage:
            err_console.print(ctx.get_usage(), markup=False, highlight=False)
            err_console.print(f"Run '{ctx.command_path} --help' for usage.", markup=False, highlight=False)
        raise typer.Exit(code=e.exit_code) from e


@contextmanager
def _remote_failure(prefix: str) -> Iterator[None]:
    try:
        yield
    except RemoteError as e:
        raise RemoteError(f"{prefix}: {e}", e.details) from e


# ============================================================================
# Command implementations
# ============================================================================


def run_create(ctx: typer.Context, version: ProtocolVersion, args: list[str], flags: CommandFlags) -> None:
    config = _load_config(ctx)
    with make_client(config.whisk) as client:
        service = RouteService(client, config.whisk, version)
        service.require_access_token()
        spec = build_create_request(
            args,
            flags.api_name,
            flags.config_file,
            version,
            config.whisk,
            web_action_check=lambda qname: is_web_action(client, qname),
        )
        with _remote_failure("Unable to create API"):
            created = service.create(spec)
    print_created(spec, created, version)


def run_get(ctx: typer.Context, version: ProtocolVersion, args: list[str], flags: CommandFlags) -> None:
    check_arg_count(args, 1, 1, "Api get", "An API base path or API name is required.")
    name = args[0]
    config = _load_config(ctx)
    with make_client(config.whisk) as client:
        service = RouteService(client, config.whisk, version)
        service.require_access_token()
        with _remote_failure(f"Unable to get API '{name}'"):
            payload = service.get_payload(name)
            collection = decode_response(ApiCollection, payload)

    # Print the gateway's own JSON; the decoded models only select the entry.
    raw_apis = []
    if collection.values():
        raw_apis = [item["value"] for item in payload.get("apis") or [] if item.get("value") is not None]
    display = None
    if raw_apis and flags.full:
        display = raw_apis[0]
    elif raw_apis:
        display = raw_apis[0].get("apidoc")

    if display is None:
        logger.debug("No API returned", extra={"base_path": name})
        if has_leading_slash(name):
            raise NotFoundError(f"API does not exist for basepath {name}", name)
        raise NotFoundError(f"API does not exist for API name {name}", name)
    print_json(display)


def run_delete(ctx: typer.Context, version: ProtocolVersion, args: list[str], flags: CommandFlags) -> None:
    check_arg_count(
        args,
        1,
        3,
        "Api delete",
        "An API base path or API name is required.  An optional API relative path and operation may also be provided.",
    )
    base_path = args[0]
    if not has_leading_slash(base_path):
        logger.debug("Treating argument as an API name; it does not begin with '/'", extra={"api_name": base_path})
    rel_path = check_rel_path(args[1]) if len(args) > 1 else None
    verb = check_verb(args[2]) if len(args) > 2 else None

    config = _load_config(ctx)
    with make_client(config.whisk) as client:
        service = RouteService(client, config.whisk, version)
        service.require_access_token()
        with _remote_failure("Unable to delete API"):
            service.delete(base_path, rel_path, verb)
    print_deleted(base_path, rel_path, verb)


def run_list(ctx: typer.Context, version: ProtocolVersion, args: list[str], flags: CommandFlags) -> None:
    check_arg_count(
        args,
        0,
        3,
        "Api list",
        "Optional parameters are: API base path (or API name), API relative path and operation.",
    )
    rel_path = check_rel_path(args[1]) if len(args) > 1 else None
    verb = check_verb(args[2]) if len(args) > 2 else None

    config = _load_config(ctx)
    with make_client(config.whisk) as client:
        service = RouteService(client, config.whisk, version)
        service.require_access_token()
        with _remote_failure("Unable to obtain the API list"):
            if args:
                collection = service.get(args[0], rel_path, verb)
            else:
                collection = service.list(limit=flags.limit, skip=flags.skip)

    route_filter = RouteFilter(rel_path=rel_path or "", verb=verb or "")
    print_listing(collection.values(), route_filter, version, flags.full)


# ============================================================================
# Command registration
# ============================================================================


def _register_commands(group: typer.Typer, version: ProtocolVersion) -> None:
    @group.command("create")
    def create(
        ctx: typer.Context,
        args: Optional[List[str]] = typer.Argument(
            None, metavar="[BASE_PATH|API_NAME] API_PATH API_VERB ACTION", show_default=False
        ),
        api_name: Optional[str] = typer.Option(
            None,
            "--apiname",
            "-n",
            help="Friendly name of the API; ignored when CFG_FILE is specified (default BASE_PATH)",
        ),
        config_file: Optional[str] = typer.Option(
            None,
            "--config-file",
            "-c",
            metavar="CFG_FILE",
            help="CFG_FILE containing API configuration in swagger JSON format",
        ),
    ) -> None:
        """create a new API"""
        with reporting_errors(ctx):
            run_create(ctx, version, args or [], CommandFlags(api_name=api_name, config_file=config_file))

    @group.command("get")
    def get(
        ctx: typer.Context,
        args: Optional[List[str]] = typer.Argument(None, metavar="BASE_PATH|API_NAME", show_default=False),
        full: bool = typer.Option(False, "--full", "-f", help="display full API configuration details"),
    ) -> None:
        """get API details"""
        with reporting_errors(ctx):
            run_get(ctx, version, args or [], CommandFlags(full=full))

    @group.command("delete")
    def delete(
        ctx: typer.Context,
        args: Optional[List[str]] = typer.Argument(
            None, metavar="BASE_PATH|API_NAME [API_PATH [API_VERB]]", show_default=False
        ),
    ) -> None:
        """delete an API"""
        with reporting_errors(ctx):
            run_delete(ctx, version, args or [], CommandFlags())

    @group.command("list")
    def list_(
        ctx: typer.Context,
        args: Optional[List[str]] = typer.Argument(
            None, metavar="[BASE_PATH|API_NAME [API_PATH [API_VERB]]]", show_default=False
        ),
        full: bool = typer.Option(False, "--full", "-f", help="display full description of each API"),
        skip: int = typer.Option(
            0, "--skip", "-s", min=0, help="exclude the first SKIP number of APIs from the result"
        ),
        limit: int = typer.Option(
            30, "--limit", "-l", min=0, help="only return LIMIT number of APIs from the collection"
        ),
    ) -> None:
        """list APIs"""
        with reporting_errors(ctx):
            run_list(ctx, version, args or [], CommandFlags(full=full, skip=skip, limit=limit))


_register_commands(api_app, ProtocolVersion.V2)
_register_commands(api_experimental_app, ProtocolVersion.V1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apigw {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    apihost: Optional[str] = typer.Option(None, "--apihost", help="whisk API HOST"),
    auth: Optional[str] = typer.Option(None, "--auth", "-u", help="authorization KEY"),
    namespace: Optional[str] = typer.Option(None, "--namespace", help="namespace for unqualified names"),
    props_file: Optional[str] = typer.Option(
        None, "--props-file", help="properties file (default ~/.wskprops or $WSK_CONFIG_FILE)"
    ),
    insecure: bool = typer.Option(False, "--insecure", "-i", help="bypass certificate checking"),
    debug: bool = typer.Option(False, "--debug", "-d", help="debug level output"),
    log_json: bool = typer.Option(False, "--log-json", help="emit logs as JSON lines"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="print the version and exit"
    ),
) -> None:
    """Manage API gateway routes."""
    ctx.obj = GlobalOptions(
        props_file=props_file,
        apihost=apihost,
        auth_key=auth,
        namespace=namespace,
        insecure=insecure,
        debug=debug,
        log_json=log_json,
    )


def main() -> None:
    app()
