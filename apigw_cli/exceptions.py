"""Exception hierarchy for the API gateway CLI.

Every error raised by this package derives from :class:`ApiGwError` and
carries what the command runner needs to report it: a human-readable
message, the process exit code, and whether the command usage text should
be shown alongside the message.

Example:
    >>> from apigw_cli.exceptions import UsageError
    >>> try:
    ...     raise UsageError("'api' must begin with '/'.")
    ... except UsageError as e:
    ...     print(e.exit_code, e.display_usage)
    1 True
"""

from __future__ import annotations

from typing import Any

EXITCODE_ERR_GENERAL = 1
EXITCODE_ERR_NETWORK = 3


class ApiGwError(Exception):
    """Base exception for all API gateway CLI errors.

    Attributes:
        message: Human-readable error message.
        exit_code: Exit code the CLI terminates with.
        display_usage: Whether the command usage is printed with the message.
        details: Optional structured context for logging.
    """

    exit_code: int = EXITCODE_ERR_GENERAL
    display_usage: bool = False

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        exit_code: int | None = None,
        display_usage: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if exit_code is not None:
            self.exit_code = exit_code
        if display_usage is not None:
            self.display_usage = display_usage

    def __str__(self) -> str:
        return self.message

    @property
    def is_network_error(self) -> bool:
        """Whether the error is classified as a network failure."""
        return self.exit_code == EXITCODE_ERR_NETWORK


class UsageError(ApiGwError):
    """Malformed or missing arguments, invalid path or verb, conflicting names."""

    display_usage = True


class ConfigError(ApiGwError):
    """Missing or structurally invalid Swagger document or configuration."""

    display_usage = True


class NotFoundError(ApiGwError):
    """The gateway returned no route matching the request."""

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message, {"name": name} if name else None)
        self.name = name


# ============================================================================
# Remote Errors
# ============================================================================


class RemoteError(ApiGwError):
    """Transport or gateway failure; reported without usage text."""

    exit_code = EXITCODE_ERR_NETWORK


class GatewayConnectionError(RemoteError):
    """Raised when the API host cannot be reached."""

    def __init__(self, host: str, original_error: Exception | None = None) -> None:
        message = f"Unable to connect to {host}"
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message, {"host": host})
        self.host = host
        self.original_error = original_error


class AuthenticationError(RemoteError):
    """Raised when the API host rejects the configured credentials."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code


class APIResponseError(RemoteError):
    """Raised when the gateway answers with an application-level error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code
        self.response_body = response_body


class ResourceNotFoundError(APIResponseError):
    """Raised when a remote resource (such as an action) does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"The requested resource does not exist: {path}", status_code=404)
        self.path = path
