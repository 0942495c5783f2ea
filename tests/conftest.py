"""Pytest configuration and fixtures for apigw-cli tests."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest

from apigw_cli.config import WhiskConfig


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's properties file and APIGW_* variables."""
    for var in [
        "APIGW_APIHOST",
        "APIGW_AUTH",
        "APIGW_NAMESPACE",
        "APIGW_ACCESS_TOKEN",
        "APIGW_INSECURE",
        "APIGW_TIMEOUT",
        "APIGW_LOG_LEVEL",
        "APIGW_LOG_JSON",
        "APIGW_LOG_FILE",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WSK_CONFIG_FILE", str(tmp_path / "missing.wskprops"))
    yield
    # CLI runs attach handlers to streams that are closed afterwards
    package_logger = logging.getLogger("apigw_cli")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)


@pytest.fixture
def whisk_config() -> WhiskConfig:
    """Create a sample connection configuration for testing."""
    return WhiskConfig(
        apihost="openwhisk.example.com",
        auth_key="23bc46b1-71f6-4ed5-8c54-816aa4f8c502:secretkey",
        namespace="guest",
        access_token="gw-access-token",
    )


@pytest.fixture
def props_file(tmp_path: Path) -> Path:
    """Create a properties file like the one written at login."""
    path = tmp_path / ".wskprops"
    path.write_text(
        "APIHOST=openwhisk.example.com\n"
        "AUTH=23bc46b1-71f6-4ed5-8c54-816aa4f8c502:secretkey\n"
        "NAMESPACE=guest\n"
        "APIGW_ACCESS_TOKEN=gw-access-token\n"
    )
    return path


@pytest.fixture
def swagger_document() -> Dict[str, Any]:
    """Create a Swagger document as stored by the gateway."""
    return {
        "swagger": "2.0",
        "basePath": "/hello",
        "info": {"title": "Hello API", "version": "1.0.0"},
        "paths": {
            "/world": {
                "get": {
                    "operationId": "getWorld",
                    "x-openwhisk": {
                        "namespace": "guest",
                        "package": "demo",
                        "action": "hello",
                        "url": "https://openwhisk.example.com/api/v1/web/guest/demo/hello.http",
                    },
                    "responses": {"default": {"description": "Default response"}},
                },
                "post": {
                    "operationId": "postWorld",
                    "x-openwhisk": {
                        "namespace": "guest",
                        "package": "",
                        "action": "greet",
                        "url": "https://openwhisk.example.com/api/v1/web/guest/default/greet.http",
                    },
                    "responses": {"default": {"description": "Default response"}},
                },
            },
            "/moon": {
                "delete": {
                    "operationId": "deleteMoon",
                    "x-openwhisk": {
                        "namespace": "guest",
                        "package": "demo",
                        "action": "bye",
                    },
                    "responses": {"default": {"description": "Default response"}},
                },
            },
        },
    }


@pytest.fixture
def ret_api(swagger_document: Dict[str, Any]) -> Dict[str, Any]:
    """Create a registered-API payload as returned by the create operation."""
    return {
        "namespace": "guest",
        "gwApiActivated": True,
        "tenantId": "23bc46b1-71f6-4ed5-8c54-816aa4f8c502",
        "gwApiUrl": "https://gateway.example.com/api/1234/hello/",
        "apidoc": swagger_document,
    }


@pytest.fixture
def api_collection(ret_api: Dict[str, Any]) -> Dict[str, Any]:
    """Create a get/list payload wrapping one registered API."""
    return {"apis": [{"id": "API:guest:/hello", "key": ["guest", "/hello"], "value": ret_api}]}


@pytest.fixture
def swagger_file(tmp_path: Path, swagger_document: Dict[str, Any]) -> Path:
    """Create a temporary Swagger file."""
    spec_file = tmp_path / "hello_swagger.json"
    with open(spec_file, "w") as f:
        json.dump(swagger_document, f)
    return spec_file


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays responses.

    ``routes`` maps a substring of the request path to either a response
    payload (answered with 200) or an ``httpx.Response``.
    """

    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for fragment, answer in self.routes.items():
            if fragment in request.url.path:
                if isinstance(answer, httpx.Response):
                    return answer
                return httpx.Response(200, json=answer)
        return httpx.Response(404, json={"error": "The requested resource does not exist."})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recording_handler() -> Callable[[Dict[str, Any]], RecordingHandler]:
    """Factory for request-recording MockTransport handlers."""
    return RecordingHandler
