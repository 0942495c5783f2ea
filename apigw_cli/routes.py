"""Route-management operations for both gateway protocol versions.

V1 (``api-experimental``) talks to the ``routemgmt`` actions and identifies
the caller by namespace. V2 (``api``) talks to the ``apimgmt`` actions and
additionally passes the tenant (space guid) and the API gateway access token
obtained at login.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from .api_client import WhiskAPIClient
from .config import WhiskConfig
from .exceptions import APIResponseError, RemoteError, ResourceNotFoundError, UsageError
from .logging_config import get_logger
from .models import ApiCollection, ProtocolVersion, RetApi, RouteSpec
from .qualified_name import QualifiedName

logger = get_logger(__name__)

ROUTE_ACTIONS = {
    ProtocolVersion.V1: "/api/v1/experimental/web/whisk.system/routemgmt/{operation}.json",
    ProtocolVersion.V2: "/api/v1/web/whisk.system/apimgmt/{operation}.http",
}

WEB_EXPORT_ANNOTATION = "web-export"


class RouteService:
    """Create, get, delete and list gateway routes.

    Attributes:
        client: Transport used for every call.
        config: Connection settings supplying namespace and credentials.
        version: Protocol version selecting endpoints and parameters.
    """

    def __init__(self, client: WhiskAPIClient, config: WhiskConfig, version: ProtocolVersion) -> None:
        self.client = client
        self.config = config
        self.version = version

    def _route(self, operation: str) -> str:
        return ROUTE_ACTIONS[self.version].format(operation=operation)

    def _tenant_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"__ow_user": self.config.namespace}
        if self.version is ProtocolVersion.V2:
            params["spaceguid"] = self.config.space_guid
            params["accesstoken"] = self.config.access_token
        return params

    def require_access_token(self) -> None:
        """V2 commands need the gateway access token obtained at login.

        Raises:
            UsageError: If no access token is configured.
        """
        if self.version is ProtocolVersion.V2 and not self.config.access_token:
            logger.debug("No APIGW_ACCESS_TOKEN in properties file")
            raise UsageError("You must login prior to issuing this command.")

    def create(self, spec: RouteSpec) -> RetApi:
        """Register a route (or every route of a Swagger document).

        Raises:
            RemoteError: If the call fails or the response is malformed.
        """
        logger.debug("Api create", extra={"route_action": self._route("createApi")})
        data = self.client.execute_operation(
            self._route("createApi"),
            "POST",
            params=self._tenant_params() if self.version is ProtocolVersion.V2 else None,
            body={"apidoc": spec.to_request()},
        )
        return decode_response(RetApi, data)

    def get_payload(self, base_path: str, rel_path: str | None = None, verb: str | None = None) -> Any:
        """Fetch the APIs registered under a base path or API name, undecoded."""
        params = self._tenant_params()
        params.update({"basepath": base_path, "relpath": rel_path, "operation": verb})
        return self.client.execute_operation(self._route("getApi"), "GET", params=params)

    def get(self, base_path: str, rel_path: str | None = None, verb: str | None = None) -> ApiCollection:
        """Fetch the APIs registered under a base path or API name."""
        return decode_response(ApiCollection, self.get_payload(base_path, rel_path, verb))

    def list(self, limit: int = 30, skip: int = 0) -> ApiCollection:
        """Fetch every API of the namespace, paginated by ``limit``/``skip``."""
        params = self._tenant_params()
        params.update({"limit": limit, "skip": skip})
        data = self.client.execute_operation(self._route("getApi"), "GET", params=params)
        return decode_response(ApiCollection, data)

    def delete(self, base_path: str, rel_path: str | None = None, verb: str | None = None) -> None:
        """Remove an API, one of its paths, or one verb of a path."""
        params = self._tenant_params()
        params.update({"basepath": base_path, "relpath": rel_path, "operation": verb})
        self.client.execute_operation(self._route("deleteApi"), "DELETE", params=params)


def decode_response(model: type[Any], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug("Unexpected gateway response", extra={"response": data})
        raise RemoteError(f"Unexpected response from the API gateway: {e}") from e


def is_web_action(client: WhiskAPIClient, qname: QualifiedName) -> tuple[bool, str]:
    """Check that an action is exported as a web action.

    Returns:
        ``(True, "")`` for a web action, otherwise ``(False, message)``.
    """
    path = f"/api/v1/namespaces/{quote(qname.namespace, safe='')}/actions/{quote(qname.entity)}"
    try:
        action = client.execute_operation(path, "GET")
    except ResourceNotFoundError:
        return False, f"Unable to get action '{qname}': The requested resource does not exist."
    except APIResponseError as e:
        return False, f"Unable to get action '{qname}': {e}"

    annotations = action.get("annotations") if isinstance(action, dict) else None
    for annotation in annotations or []:
        if annotation.get("key") == WEB_EXPORT_ANNOTATION and annotation.get("value") is True:
            return True, ""

    logger.debug("Action is not web-exported", extra={"action": str(qname)})
    return (
        False,
        f"Action '{qname}' is not a web action. Issue 'wsk action update "
        f"\"{qname}\" --web true' to convert the action to a web action.",
    )
