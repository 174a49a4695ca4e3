from __future__ import annotations

from typing import TypedDict

# Type aliases for JSON-like values used in OpenAPI documents and call arguments
JsonPrimitive = str | int | float | bool | None
JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]

# Schemas are carried through untouched; arguments are never validated against them
SchemaObject = dict[str, object]

MediaTypeObject = TypedDict(
    "MediaTypeObject",
    {
        "schema": SchemaObject,
    },
    total=False,
)

RequestBodyObject = TypedDict(
    "RequestBodyObject",
    {
        "description": str,
        "content": dict[str, MediaTypeObject],
        "required": bool,
    },
    total=False,
)

ParameterObject = TypedDict(
    "ParameterObject",
    {
        "name": str,
        "in": str,
        "description": str,
        "required": bool,
        "schema": SchemaObject,
        "style": str,
        "explode": bool,
    },
    total=False,
)

OperationObject = TypedDict(
    "OperationObject",
    {
        "operationId": str,
        "summary": str,
        "description": str,
        "tags": list[str],
        "parameters": list[ParameterObject],
        "requestBody": RequestBodyObject,
        "responses": dict[str, object],
        "deprecated": bool,
    },
    total=False,
)

PathItemObject = TypedDict(
    "PathItemObject",
    {
        "summary": str,
        "description": str,
        "parameters": list[ParameterObject],
        "get": OperationObject,
        "put": OperationObject,
        "post": OperationObject,
        "delete": OperationObject,
        "options": OperationObject,
        "head": OperationObject,
        "patch": OperationObject,
        "trace": OperationObject,
    },
    total=False,
)

InfoObject = TypedDict(
    "InfoObject",
    {
        "title": str,
        "version": str,
        "description": str,
    },
    total=False,
)

ServerVariableObject = TypedDict(
    "ServerVariableObject",
    {
        "enum": list[str],
        "default": str,
        "description": str,
    },
    total=False,
)

ServerObject = TypedDict(
    "ServerObject",
    {
        "url": str,
        "description": str,
        "variables": dict[str, ServerVariableObject],
    },
    total=False,
)

OpenAPIDocument = TypedDict(
    "OpenAPIDocument",
    {
        "openapi": str,
        "info": InfoObject,
        "servers": list[ServerObject],
        "paths": dict[str, PathItemObject],
        "components": dict[str, object],
    },
    total=False,
)
