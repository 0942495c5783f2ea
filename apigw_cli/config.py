"""Configuration loader for the API gateway CLI.

This module provides configuration management using Pydantic models for
validation. Values are layered: the properties file first, then environment
variables, then explicit overrides (usually CLI options).

Example:
    >>> from apigw_cli.config import load_config
    >>> config = load_config()
    >>> print(config.whisk.namespace)
    _

Properties file (``~/.wskprops`` unless ``WSK_CONFIG_FILE`` is set)::

    APIHOST=openwhisk.example.com
    AUTH=23bc46b1-71f6-4ed5-8c54-816aa4f8c502:123zO3xZCLrMN6v2BKK1dXYFpXlPkccOFqm12CdAsMgRU4VrNZ9lyGVCGuMDGIwP
    NAMESPACE=guest
    APIGW_ACCESS_TOKEN=...

Environment Variables:
    WSK_CONFIG_FILE: Path to the properties file.
    APIGW_APIHOST: API host (overrides APIHOST).
    APIGW_AUTH: Authorization key (overrides AUTH).
    APIGW_NAMESPACE: Namespace (overrides NAMESPACE).
    APIGW_ACCESS_TOKEN: API gateway access token.
    APIGW_INSECURE: Skip TLS verification (default: false).
    APIGW_LOG_LEVEL: Logging level (default: WARNING).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROPS_FILE = "~/.wskprops"
DEFAULT_NAMESPACE = "_"

PROP_APIHOST = "APIHOST"
PROP_AUTH = "AUTH"
PROP_NAMESPACE = "NAMESPACE"
PROP_ACCESS_TOKEN = "APIGW_ACCESS_TOKEN"


class WhiskConfig(BaseModel):
    """Connection settings for the platform hosting the gateway.

    Attributes:
        apihost: API host, with or without a scheme.
        auth_key: ``uuid:key`` authorization key.
        namespace: Default namespace for unqualified action names.
        access_token: API gateway access token (required by ``api`` commands).
        tls_verify: Whether to verify TLS certificates.
        timeout: Request timeout in seconds.
        max_retries: Retry attempts for transient transport errors.
    """

    apihost: str | None = Field(
        default=None,
        description="API host (e.g. openwhisk.example.com)",
    )
    auth_key: str | None = Field(
        default=None,
        description="Authorization key as uuid:key",
    )
    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        description="Default namespace",
    )
    access_token: str | None = Field(
        default=None,
        description="API gateway access token",
    )
    tls_verify: bool = Field(
        default=True,
        description="Verify TLS certificates",
    )
    timeout: int = Field(
        default=30,
        ge=1,
        le=600,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Retry attempts for transient errors",
    )

    @field_validator("auth_key")
    @classmethod
    def validate_auth_key(cls, v: str | None) -> str | None:
        """Validate that an authorization key has the ``uuid:key`` shape.

        Args:
            v: The key to validate.

        Returns:
            The validated key.

        Raises:
            ValueError: If the key has no ``:`` separator.
        """
        if v and ":" not in v:
            raise ValueError("authorization key must have the form uuid:key")
        return v

    @property
    def host(self) -> str:
        """API host without scheme or trailing slash."""
        host = self.apihost or ""
        for scheme in ("https://", "http://"):
            if host.startswith(scheme):
                host = host[len(scheme):]
        return host.rstrip("/")

    @property
    def base_url(self) -> str:
        """Base URL used by the transport."""
        if self.apihost and self.apihost.startswith("http://"):
            return f"http://{self.host}"
        return f"https://{self.host}"

    @property
    def space_guid(self) -> str:
        """Tenant id: the first ``:``-delimited segment of the auth key."""
        return (self.auth_key or "").split(":")[0]

    model_config = {"extra": "ignore"}


class CliConfig(BaseModel):
    """Logging settings for a CLI invocation.

    Attributes:
        log_level: Logging level.
        log_json: Use JSON format for logs.
        log_file: Optional log file path.
    """

    log_level: str = Field(
        default="WARNING",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    model_config = {"extra": "ignore"}


class Config(BaseModel):
    """Main configuration container.

    Attributes:
        whisk: Connection settings.
        cli: Logging settings.
        props_file: Properties file the settings were read from.
    """

    whisk: WhiskConfig = Field(default_factory=WhiskConfig)
    cli: CliConfig = Field(default_factory=CliConfig)
    props_file: str | None = None

    model_config = {"extra": "ignore"}


def get_props_path(props_file: str | None = None) -> Path:
    """Resolve the properties file path.

    Args:
        props_file: Explicit path; falls back to ``WSK_CONFIG_FILE`` and then
            ``~/.wskprops``.

    Returns:
        The expanded path (which may not exist).
    """
    path = props_file or os.getenv("WSK_CONFIG_FILE") or DEFAULT_PROPS_FILE
    return Path(path).expanduser()


def read_properties(path: str | Path) -> dict[str, str]:
    """Read a ``KEY=VALUE`` properties file.

    A missing file yields an empty mapping; keys without a value are dropped.
    """
    path = Path(path)
    if not path.is_file():
        logger.debug("Properties file not found", extra={"props_file": str(path)})
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def load_config(props_file: str | None = None, **overrides: Any) -> Config:
    """Load configuration from the properties file and environment.

    Args:
        props_file: Optional path to the properties file.
        **overrides: Explicit values (``apihost``, ``auth_key``, ``namespace``,
            ``access_token``, ``tls_verify``, ``log_level``, ``log_json``,
            ``log_file``); ``None`` values are ignored.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If a configured value is invalid.
    """
    path = get_props_path(props_file)
    props = read_properties(path)

    logger.debug("Loading configuration", extra={"props_file": str(path)})

    whisk_values: dict[str, Any] = {
        "apihost": os.getenv("APIGW_APIHOST") or props.get(PROP_APIHOST),
        "auth_key": os.getenv("APIGW_AUTH") or props.get(PROP_AUTH),
        "namespace": os.getenv("APIGW_NAMESPACE") or props.get(PROP_NAMESPACE) or DEFAULT_NAMESPACE,
        "access_token": os.getenv("APIGW_ACCESS_TOKEN") or props.get(PROP_ACCESS_TOKEN),
        "tls_verify": not _env_flag("APIGW_INSECURE"),
        "timeout": os.getenv("APIGW_TIMEOUT", "30"),
    }
    cli_values: dict[str, Any] = {
        "log_level": os.getenv("APIGW_LOG_LEVEL", "WARNING").upper(),
        "log_json": _env_flag("APIGW_LOG_JSON"),
        "log_file": os.getenv("APIGW_LOG_FILE"),
    }

    for key, value in overrides.items():
        if value is None:
            continue
        if key in WhiskConfig.model_fields:
            whisk_values[key] = value
        elif key in CliConfig.model_fields:
            cli_values[key] = value
        else:
            raise ConfigError(f"Unknown configuration option: {key}")

    try:
        config = Config(
            whisk=WhiskConfig(**whisk_values),
            cli=CliConfig(**cli_values),
            props_file=str(path),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(
        "Configuration loaded",
        extra={"apihost": config.whisk.apihost, "namespace": config.whisk.namespace},
    )
    return config
