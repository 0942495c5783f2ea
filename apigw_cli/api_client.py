"""HTTP client for the platform API hosting the route-management actions.

Every request carries HTTP Basic Authentication derived from the ``uuid:key``
authorization key. The client is synchronous: a CLI command performs one
route call and exits.

Example:
    >>> with WhiskAPIClient(host="openwhisk.example.com", auth_key="uuid:key") as client:
    ...     action = client.execute_operation("/api/v1/namespaces/guest/actions/hello")
    ...     print(action["name"])

Note:
    Platform API URL structure:
    - Actions: /api/v1/namespaces/{namespace}/actions/{[package/]action}
    - Web actions: /api/v1/web/{namespace}/{package}/{action}.{extension}

    Route management is itself exposed as web actions of the
    ``whisk.system`` namespace, e.g.
    /api/v1/web/whisk.system/apimgmt/getApi.http
"""

from __future__ import annotations

import base64
import time
from typing import Any
from urllib.parse import urljoin

import httpx

from .exceptions import (
    APIResponseError,
    AuthenticationError,
    GatewayConnectionError,
    ResourceNotFoundError,
)
from .logging_config import LoggerAdapter, get_logger

logger = get_logger(__name__)

USER_AGENT = "apigw-cli"


class WhiskAPIClient:
    """Platform API client using HTTP Basic Authentication.

    Attributes:
        host: API host address.
        base_url: Full base URL for API requests.

    Example:
        >>> client = WhiskAPIClient(host="openwhisk.example.com", auth_key="uuid:key")
        >>> try:
        ...     result = client.execute_operation("/api/v1/namespaces/_/actions")
        ... finally:
        ...     client.close()
    """

    def __init__(
        self,
        host: str,
        auth_key: str | None = None,
        use_https: bool = True,
        tls_verify: bool = True,
        timeout: int = 30,
        max_retries: int = 0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            host: API host without scheme (e.g., "openwhisk.example.com").
            auth_key: ``uuid:key`` authorization key; requests are
                unauthenticated without it.
            use_https: Use HTTPS instead of HTTP.
            tls_verify: Whether to verify TLS certificates.
            timeout: Request timeout in seconds.
            max_retries: Retry attempts for connection errors and timeouts.
            transport: Optional httpx transport (used by tests).

        Raises:
            ValueError: If host is empty.
        """
        if not host:
            raise ValueError("host is required")

        self.host = host
        self.use_https = use_https
        self.tls_verify = tls_verify
        self.timeout = timeout
        self.max_retries = max_retries
        self._transport = transport

        protocol = "https" if use_https else "http"
        self.base_url = f"{protocol}://{host}"

        self._auth_header: str | None = None
        if auth_key:
            encoded = base64.b64encode(auth_key.encode()).decode()
            self._auth_header = f"Basic {encoded}"

        self._logger = LoggerAdapter(logger, {"host": host})

        # Created lazily
        self.client: httpx.Client | None = None

    def _ensure_client(self) -> httpx.Client:
        if self.client is None:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            }
            if self._auth_header:
                headers["Authorization"] = self._auth_header
            self.client = httpx.Client(
                verify=self.tls_verify,
                timeout=self.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            )
        return self.client

    def execute_operation(
        self,
        path: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a request and return the decoded JSON body.

        Args:
            path: API path (e.g., "/api/v1/namespaces/guest/actions/hello").
            method: HTTP method (GET, POST, PUT, DELETE).
            params: Query parameters; ``None`` values are dropped.
            body: JSON request body.

        Returns:
            Parsed JSON response.

        Raises:
            AuthenticationError: If credentials are rejected.
            GatewayConnectionError: If the host cannot be reached.
            ResourceNotFoundError: If the resource does not exist.
            APIResponseError: If the API returns any other error.
        """
        client = self._ensure_client()
        url = urljoin(self.base_url, path)
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        self._logger.debug(
            f"Executing {method} {path}",
            extra={"has_body": body is not None},
        )

        for attempt in range(self.max_retries + 1):
            try:
                response = self._make_request(client, method, url, params, body)
                return self._parse_response(response, path)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < self.max_retries:
                    wait_time = (2**attempt) * 0.5
                    self._logger.warning(
                        f"Request failed, retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})",
                        extra={"error": str(e)},
                    )
                    time.sleep(wait_time)
                else:
                    raise GatewayConnectionError(self.host, e) from e
            except httpx.HTTPError as e:
                raise GatewayConnectionError(self.host, e) from e

        raise GatewayConnectionError(self.host)

    def _make_request(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        method = method.upper()

        if method == "GET":
            response = client.get(url, params=params)
        elif method == "POST":
            response = client.post(url, params=params, json=body)
        elif method == "PUT":
            response = client.put(url, params=params, json=body)
        elif method == "DELETE":
            response = client.delete(url, params=params)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        return response

    def _parse_response(self, response: httpx.Response, path: str = "") -> Any:
        """Validate the status code and decode the body.

        Raises:
            AuthenticationError: If authentication failed (401).
            ResourceNotFoundError: If the resource was not found (404).
            APIResponseError: For other 4xx/5xx responses.
        """
        if response.status_code == 401:
            raise AuthenticationError(
                "The supplied authentication is invalid",
                status_code=401,
            )

        if response.status_code == 404:
            raise ResourceNotFoundError(path)

        if response.status_code >= 400:
            try:
                error_body = response.json()
                error_message = (
                    error_body.get("error")
                    or error_body.get("message")
                    or str(error_body)
                ) if isinstance(error_body, dict) else str(error_body)
            except ValueError:
                error_message = response.text or f"HTTP {response.status_code}"

            raise APIResponseError(
                message=error_message,
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            self._logger.warning(
                f"Response is not JSON: {e}",
                extra={"content_type": response.headers.get("content-type")},
            )
            return {"raw_response": response.text}

        self._logger.debug(
            "Request successful",
            extra={"status_code": response.status_code},
        )
        return data

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self.client:
            self.client.close()
            self.client = None
            self._logger.debug("HTTP client closed")

    def __enter__(self) -> "WhiskAPIClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
