"""API gateway route management CLI.

This package registers, inspects and removes HTTP routes ("APIs") on an
API gateway that fronts serverless actions. Routes are described either by
command arguments or by a Swagger document, and listings are flattened out
of the Swagger documents the gateway stores.

Features:
    - ``api`` commands (V2 protocol, web-action backends)
    - ``api-experimental`` commands (V1 protocol)
    - Swagger file upload with structural validation
    - Tabular and full-detail listings with path/verb filters

Example:
    Using as a CLI tool::

        $ apigw api create /hello /world get hello
        $ apigw api list

    Using as a library::

        from apigw_cli import ProtocolVersion, build_route_spec, load_config

        config = load_config()
        spec = build_route_spec(
            ["/hello", "/world", "get", "/guest/hello"],
            None,
            ProtocolVersion.V1,
            config.whisk,
        )

Attributes:
    __version__: Package version following semantic versioning.
"""

__version__ = "1.0.0"

# Import public API
from .config import load_config
from .flatten import flatten, flatten_collection
from .models import FlatRoute, ProtocolVersion, RouteSpec
from .route_builder import build_route_spec, load_swagger_route_spec
from .validation import has_leading_slash, is_valid_verb

__all__ = [
    "__version__",
    "FlatRoute",
    "ProtocolVersion",
    "RouteSpec",
    "build_route_spec",
    "flatten",
    "flatten_collection",
    "has_leading_slash",
    "is_valid_verb",
    "load_config",
    "load_swagger_route_spec",
]
