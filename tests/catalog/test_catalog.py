from __future__ import annotations

import logging
from typing import cast

import pytest

from openapi_proxy.catalog import Operation, OperationCatalog, Parameter, build_catalog, synthesize_operation_id
from openapi_proxy.errors import UnknownOperation
from openapi_proxy.openapi import OpenAPIDocument


def _catalog(paths: dict[str, object]) -> OperationCatalog:
    return build_catalog(cast(OpenAPIDocument, {"openapi": "3.0.3", "paths": paths}))


class TestSynthesizeOperationId:
    @pytest.mark.parametrize(
        "method, path, expected",
        [
            pytest.param("GET", "/users/{id}/orders", "getUsersByIdOrders", id="nested"),
            pytest.param("GET", "/users/{id}", "getUsersById", id="single"),
            pytest.param("POST", "/user-groups/{group_id}", "postUsergroupsByGroupid", id="punctuation"),
            pytest.param("DELETE", "/", "delete", id="root"),
            pytest.param("PATCH", "/v1/items", "patchV1items", id="digits"),
        ],
    )
    def test_synthesis(self, method: str, path: str, expected: str) -> None:
        assert synthesize_operation_id(method, path) == expected


class TestBuildCatalog:
    def test_synthesised_id_is_registered_lowercase(self) -> None:
        catalog = _catalog({"/users/{id}": {"get": {"responses": {}}}})
        assert catalog.names() == ["getusersbyid"]
        assert catalog.info("getusersbyid")["path"] == "/users/{id}"
        assert catalog.info("getusersbyid")["operationId"] == "getUsersById"

    def test_lookup_is_case_insensitive(self) -> None:
        catalog = _catalog({"/pets": {"get": {"operationId": "listPets"}}})
        operation = catalog.lookup("LISTPETS")
        assert operation is not None
        assert operation.operation_id == "listPets"
        assert "listpets" in catalog
        assert catalog.lookup("missing") is None

    def test_require_unknown_raises(self) -> None:
        catalog = _catalog({})
        with pytest.raises(UnknownOperation) as excinfo:
            catalog.require("doesNotExist")
        assert excinfo.value.name == "doesNotExist"

    def test_one_operation_per_path_and_method(self) -> None:
        catalog = _catalog(
            {
                "/pets": {"get": {}, "post": {}, "trace": {}, "summary": "not an operation"},
                "/pets/{id}": {"get": {}, "put": {}, "delete": {}, "patch": {}, "head": {}, "options": {}},
            }
        )
        assert len(catalog) == 8
        for operation in catalog:
            assert catalog.lookup(operation.operation_id) == operation

    def test_methods_iterate_in_fixed_order(self) -> None:
        catalog = _catalog({"/a": {"options": {}, "delete": {}, "get": {}, "post": {}}})
        assert [operation.method for operation in catalog] == ["GET", "POST", "DELETE", "OPTIONS"]

    def test_collision_last_wins_and_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="openapi_proxy.catalog"):
            catalog = _catalog(
                {
                    "/a": {"get": {"operationId": "fetch"}},
                    "/b": {"get": {"operationId": "Fetch"}},
                }
            )
        assert len(catalog) == 1
        operation = catalog.require("fetch")
        assert operation.path == "/b"
        assert "collision" in caplog.text

    def test_merges_path_level_parameters(self) -> None:
        catalog = _catalog(
            {
                "/items/{id}": {
                    "parameters": [
                        {"name": "id", "in": "path", "required": True},
                        {"name": "q", "in": "query", "required": False},
                    ],
                    "get": {
                        "operationId": "getItem",
                        "parameters": [{"name": "q", "in": "query", "required": True}],
                    },
                }
            }
        )
        operation = catalog.require("getItem")
        assert operation.parameters == (
            Parameter(name="id", location="path", required=True),
            Parameter(name="q", location="query", required=True),
        )

    def test_request_body_presence(self) -> None:
        catalog = _catalog(
            {
                "/items": {
                    "post": {
                        "operationId": "createItem",
                        "requestBody": {"required": True, "content": {"application/json": {}}},
                    },
                    "get": {"operationId": "listItems"},
                }
            }
        )
        created = catalog.require("createItem")
        assert created.request_body is not None
        assert created.request_body.required is True
        assert created.request_body.content_types == ("application/json",)
        assert catalog.require("listItems").request_body is None

    def test_path_without_leading_slash_is_normalised(self) -> None:
        catalog = _catalog({"health": {"get": {}}})
        assert catalog.require("getHealth").path == "/health"

    def test_info_shape(self) -> None:
        catalog = _catalog(
            {
                "/users/{id}": {
                    "get": {
                        "operationId": "getUser",
                        "summary": "Fetch one",
                        "parameters": [{"name": "id", "in": "path", "required": True, "description": "User id"}],
                    }
                }
            }
        )
        assert catalog.methods() == {
            "getuser": {
                "operationId": "getUser",
                "method": "GET",
                "path": "/users/{id}",
                "summary": "Fetch one",
                "description": "",
                "parameters": [{"name": "id", "in": "path", "required": True, "description": "User id"}],
            }
        }


class TestOperation:
    def test_parameters_in(self) -> None:
        operation = Operation(
            operation_id="search",
            method="GET",
            path="/search",
            parameters=(Parameter("q", "query"), Parameter("X-Trace", "header")),
        )
        assert [param.name for param in operation.parameters_in("query")] == ["q"]
        assert operation.parameter_names() == {"q", "X-Trace"}
        assert operation.key == "search"
        assert operation.has_request_body is False
