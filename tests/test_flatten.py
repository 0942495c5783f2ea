"""Tests for flattening gateway Swagger documents."""

import pytest

from apigw_cli.flatten import (
    MAX_ACTION_NAME_WIDTH,
    MAX_API_NAME_WIDTH,
    column_widths,
    compose_action_name,
    flatten,
    flatten_collection,
    max_action_name_width,
    max_api_name_width,
)
from apigw_cli.models import ActionExtension, ApiCollection, ProtocolVersion, RetApi, RouteFilter, SwaggerDocument


def make_api(title, paths, base_url="https://gateway.example.com/api/1234/base"):
    return RetApi.model_validate(
        {
            "gwApiUrl": base_url,
            "apidoc": {"swagger": "2.0", "basePath": "/base", "info": {"title": title}, "paths": paths},
        }
    )


def op(namespace="guest", package="", action="act"):
    return {"x-openwhisk": {"namespace": namespace, "package": package, "action": action}}


class TestComposeActionName:
    """Tests for version-dependent action names."""

    def test_v1_ignores_package(self):
        extension = ActionExtension(namespace="guest", package="demo", action_name="hello")
        assert compose_action_name(extension, ProtocolVersion.V1) == "/guest/hello"

    def test_v2_includes_package(self):
        extension = ActionExtension(namespace="guest", package="demo", action_name="hello")
        assert compose_action_name(extension, ProtocolVersion.V2) == "/guest/demo/hello"

    def test_v2_without_package(self):
        extension = ActionExtension(namespace="guest", action_name="hello")
        assert compose_action_name(extension, ProtocolVersion.V2) == "/guest/hello"

    def test_null_package(self):
        extension = ActionExtension.model_validate({"namespace": "guest", "package": None, "action": "hello"})
        assert compose_action_name(extension, ProtocolVersion.V2) == "/guest/hello"

    def test_missing_extension(self):
        assert compose_action_name(None, ProtocolVersion.V2) == ""


class TestFlatten:
    """Tests for flatten and its filters."""

    def test_all_operations(self, swagger_document):
        document = SwaggerDocument.model_validate(swagger_document)
        routes = flatten(document, RouteFilter(), ProtocolVersion.V2, "https://gw.example.com/api/1/hello/")
        assert {(r.rel_path, r.verb) for r in routes} == {("/world", "get"), ("/world", "post"), ("/moon", "delete")}
        get_world = next(r for r in routes if r.verb == "get")
        assert get_world.action_name == "/guest/demo/hello"
        assert get_world.api_name == "Hello API"
        assert get_world.base_path == "/hello"
        assert get_world.full_url == "https://gw.example.com/api/1/hello/world"

    def test_rel_path_filter(self):
        document = SwaggerDocument.model_validate(
            {"paths": {"/a": {"get": op(action="a")}, "/b": {"post": op(action="b")}}}
        )
        routes = flatten(document, RouteFilter(rel_path="/a"), ProtocolVersion.V1)
        assert len(routes) == 1
        assert (routes[0].rel_path, routes[0].verb) == ("/a", "get")

    def test_rel_path_filter_independent_of_order(self):
        document = SwaggerDocument.model_validate(
            {"paths": {"/b": {"post": op(action="b")}, "/a": {"get": op(action="a")}}}
        )
        routes = flatten(document, RouteFilter(rel_path="/a"), ProtocolVersion.V1)
        assert [(r.rel_path, r.verb) for r in routes] == [("/a", "get")]

    def test_rel_path_filter_is_case_sensitive(self, swagger_document):
        document = SwaggerDocument.model_validate(swagger_document)
        assert flatten(document, RouteFilter(rel_path="/World"), ProtocolVersion.V2) == []

    @pytest.mark.parametrize("verb", ["GET", "get", "Get"])
    def test_verb_filter_ignores_case(self, swagger_document, verb):
        document = SwaggerDocument.model_validate(swagger_document)
        routes = flatten(document, RouteFilter(rel_path="/world", verb=verb), ProtocolVersion.V2)
        assert [r.verb for r in routes] == ["get"]

    def test_v1_names_have_no_package(self, swagger_document):
        document = SwaggerDocument.model_validate(swagger_document)
        routes = flatten(document, RouteFilter(), ProtocolVersion.V1)
        assert all(r.action_name.count("/") == 2 for r in routes)

    def test_none_document(self):
        assert flatten(None, RouteFilter(), ProtocolVersion.V2) == []

    def test_non_operation_path_entries_are_ignored(self):
        document = SwaggerDocument.model_validate(
            {"paths": {"/a": {"parameters": [{"name": "id"}], "get": op()}}}
        )
        routes = flatten(document, RouteFilter(), ProtocolVersion.V2)
        assert [r.verb for r in routes] == ["get"]

    def test_collection(self, api_collection):
        apis = ApiCollection.model_validate(api_collection).values()
        routes = flatten_collection(apis + apis, RouteFilter(verb="delete"), ProtocolVersion.V2)
        assert len(routes) == 2
        assert routes[0].full_url == "https://gateway.example.com/api/1234/hello/moon"


class TestWidths:
    """Tests for display-width statistics."""

    def test_max_action_name_width(self):
        apis = [make_api("A", {"/a": {"get": op(action="abc")}, "/b": {"get": op(action="abcdefgh")}})]
        assert max_action_name_width(apis, RouteFilter(), ProtocolVersion.V1) == len("/guest/abcdefgh")

    def test_width_uses_same_filter(self):
        apis = [make_api("A", {"/a": {"get": op(action="abc")}, "/b": {"get": op(action="abcdefgh")}})]
        assert max_action_name_width(apis, RouteFilter(rel_path="/a"), ProtocolVersion.V1) == len("/guest/abc")

    def test_width_follows_version(self):
        apis = [make_api("A", {"/a": {"get": op(package="pkg", action="abc")}})]
        assert max_action_name_width(apis, RouteFilter(), ProtocolVersion.V1) == len("/guest/abc")
        assert max_action_name_width(apis, RouteFilter(), ProtocolVersion.V2) == len("/guest/pkg/abc")

    def test_api_name_width_only_counts_matching_apis(self):
        apis = [
            make_api("Short", {"/a": {"get": op()}}),
            make_api("A much longer API title", {"/b": {"get": op()}}),
        ]
        assert max_api_name_width(apis, RouteFilter(rel_path="/a"), ProtocolVersion.V2) == len("Short")
        assert max_api_name_width(apis, RouteFilter(), ProtocolVersion.V2) == len("A much longer API title")

    def test_empty_set(self):
        assert max_action_name_width([], RouteFilter(), ProtocolVersion.V2) == 0
        assert max_api_name_width([], RouteFilter(), ProtocolVersion.V2) == 0

    def test_column_widths_never_below_headers(self):
        apis = [make_api("A", {"/a": {"get": op(namespace="n", action="x")}})]
        assert column_widths(apis, RouteFilter(), ProtocolVersion.V2) == (len("Action"), len("API Name"))

    def test_column_widths_clamped(self):
        apis = [make_api("T" * 50, {"/a": {"get": op(action="x" * 60)}})]
        assert column_widths(apis, RouteFilter(), ProtocolVersion.V2) == (MAX_ACTION_NAME_WIDTH, MAX_API_NAME_WIDTH)

    def test_width_is_monotonic(self):
        apis = [make_api("A", {"/a": {"get": op(action="abc")}})]
        before = max_action_name_width(apis, RouteFilter(), ProtocolVersion.V2)
        apis.append(make_api("B", {"/b": {"get": op(action="abcdefghij")}}))
        after = max_action_name_width(apis, RouteFilter(), ProtocolVersion.V2)
        assert after >= before
        apis.append(make_api("C", {"/c": {"get": op(action="a")}}))
        assert max_action_name_width(apis, RouteFilter(), ProtocolVersion.V2) == after
