"""Typed request and response models for gateway route management.

Outbound, a :class:`RouteSpec` is the ``apidoc`` sent to the gateway's
create operation. Inbound, the gateway answers with a :class:`RetApi`
(create) or an :class:`ApiCollection` of them (get and list), each holding
a Swagger document whose operations carry an ``x-openwhisk`` extension
naming the backing action.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class ProtocolVersion(str, Enum):
    """Gateway management protocol: V1 (``api-experimental``) or V2 (``api``)."""

    V1 = "v1"
    V2 = "v2"


# ============================================================================
# Outbound
# ============================================================================


class ApiAction(BaseModel):
    """Backend action invoked by a route."""

    name: str
    namespace: str
    backend_method: str = Field(alias="backendMethod")
    backend_url: str = Field(alias="backendUrl")
    auth: str | None = Field(default=None, alias="authkey")

    model_config = {"populate_by_name": True}


class RouteSpec(BaseModel):
    """Canonical route-registration request.

    Either ``rel_path``, ``verb`` and ``action`` are all set, or ``swagger``
    is set and none of them are.
    """

    namespace: str = Field(min_length=1)
    api_name: str | None = Field(default=None, alias="apiName")
    base_path: str = Field(default="/", alias="gatewayBasePath")
    rel_path: str | None = Field(default=None, alias="gatewayPath")
    verb: str | None = Field(default=None, alias="gatewayMethod")
    record_id: str | None = Field(default=None, alias="id")
    swagger: str | None = None
    action: ApiAction | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_route_or_swagger(self) -> "RouteSpec":
        positional = (self.rel_path, self.verb, self.action)
        if self.swagger:
            if any(value is not None for value in positional):
                raise ValueError("a swagger document excludes path, verb and action")
        elif any(value is None for value in positional):
            raise ValueError("path, verb and action are required without a swagger document")
        return self

    @property
    def is_swagger(self) -> bool:
        return bool(self.swagger)

    def to_request(self) -> dict[str, Any]:
        """Serialize as the gateway's ``apidoc`` payload."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Inbound
# ============================================================================


class ActionExtension(BaseModel):
    """The ``x-openwhisk`` block of a Swagger operation."""

    namespace: str = ""
    package: str = ""
    action_name: str = Field(default="", alias="action")
    url: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("package", mode="before")
    @classmethod
    def none_package_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class SwaggerOperation(BaseModel):
    operation_id: str | None = Field(default=None, alias="operationId")
    extension: ActionExtension | None = Field(default=None, alias="x-openwhisk")

    model_config = {"populate_by_name": True, "extra": "allow"}


class SwaggerInfo(BaseModel):
    title: str = ""
    version: str = ""

    model_config = {"extra": "allow"}


class SwaggerDocument(BaseModel):
    """Swagger document as stored by the gateway.

    ``paths`` maps a relative path to its verb-to-operation mapping. Path-level
    entries that are not operations (such as shared ``parameters``) are
    dropped.
    """

    swagger: str | None = None
    base_path: str | None = Field(default=None, alias="basePath")
    info: SwaggerInfo | None = None
    paths: dict[str, dict[str, SwaggerOperation]] = Field(default_factory=dict)

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("paths", mode="before")
    @classmethod
    def keep_operations_only(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        paths: dict[Any, Any] = {}
        for path, ops in v.items():
            if ops is None:
                ops = {}
            if isinstance(ops, dict):
                ops = {op: body for op, body in ops.items() if isinstance(body, dict)}
            # Anything else is left for the dict_type check to reject.
            paths[path] = ops
        return paths

    @property
    def title(self) -> str:
        return self.info.title if self.info else ""


class RetApi(BaseModel):
    """One gateway-registered API."""

    namespace: str | None = None
    base_url: str = Field(default="", alias="gwApiUrl")
    activated: bool | None = Field(default=None, alias="gwApiActivated")
    tenant_id: str | None = Field(default=None, alias="tenantId")
    swagger: SwaggerDocument | None = Field(default=None, alias="apidoc")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("base_url", mode="before")
    @classmethod
    def none_url_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ApiItem(BaseModel):
    id: str | None = None
    key: Any = None
    value: RetApi | None = None

    model_config = {"extra": "allow"}


class ApiCollection(BaseModel):
    """Response of the get and list operations."""

    apis: list[ApiItem] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    @field_validator("apis", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def values(self) -> list[RetApi]:
        """Registered APIs in response order, skipping empty entries."""
        return [item.value for item in self.apis if item.value is not None]


# ============================================================================
# Listing
# ============================================================================


class RouteFilter(BaseModel):
    """Optional relative-path and verb restriction applied to listings."""

    rel_path: str = ""
    verb: str = ""


class FlatRoute(BaseModel):
    """One route of a listing, flattened out of a Swagger document."""

    action_name: str
    verb: str
    rel_path: str
    base_path: str
    api_name: str
    full_url: str

    model_config = {"frozen": True}


class CommandFlags(BaseModel):
    """Flags of a single command invocation."""

    api_name: str | None = None
    config_file: str | None = None
    full: bool = False
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=30, ge=0)
