"""Operation catalog built from an OpenAPI document.

The catalog is the in-memory registry of callable operations. It is built
once from a resolved OpenAPI document and is read-only afterwards, so it can
be shared between threads without locking.

Key classes:
- Parameter: A declared request parameter and its location
- RequestBody: Whether and how an operation accepts a request body
- Operation: One (path, HTTP method) pair with its parameters
- OperationCatalog: Case-insensitive mapping from operation names to operations
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, cast

from .errors import UnknownOperation
from .openapi import OpenAPIDocument, OperationObject, ParameterObject, PathItemObject, RequestBodyObject

logger = logging.getLogger(__name__)

# Catalog iteration order for the methods of a single path
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class Parameter:
    """A declared request parameter.

    Attributes:
        name: The parameter name, matched case-sensitively against arguments
        location: Where the parameter is sent ("path", "query", "header", "cookie")
        required: Whether the parameter must be supplied
        description: Human-readable description, empty when absent
    """

    name: str
    location: str
    required: bool = False
    description: str = ""

    def info(self) -> dict[str, object]:
        return {
            "name": self.name,
            "in": self.location,
            "required": self.required,
            "description": self.description,
        }


@dataclass(frozen=True)
class RequestBody:
    """Request body descriptor.

    Attributes:
        required: Whether the request body is required
        content_types: Declared media types, in document order
    """

    required: bool = False
    content_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class Operation:
    """A callable operation.

    Attributes:
        operation_id: The declared or synthesised operation identifier, original case
        method: The HTTP method (uppercase: "GET", "POST", etc.)
        path: The URL path template (e.g., "/users/{id}")
        parameters: Declared parameters, path-level ones merged under operation-level ones
        request_body: The request body descriptor, None when no body is declared
        summary: Short summary, empty when absent
        description: Long description, empty when absent
    """

    operation_id: str
    method: str
    path: str
    parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None
    summary: str = ""
    description: str = ""

    @property
    def key(self) -> str:
        return self.operation_id.lower()

    @property
    def has_request_body(self) -> bool:
        return self.request_body is not None

    def parameters_in(self, location: str) -> list[Parameter]:
        return [param for param in self.parameters if param.location == location]

    def parameter_names(self) -> set[str]:
        return {param.name for param in self.parameters}

    def info(self) -> dict[str, object]:
        """Metadata record exposed to diagnostic callers."""
        return {
            "operationId": self.operation_id,
            "method": self.method,
            "path": self.path,
            "summary": self.summary,
            "description": self.description,
            "parameters": [param.info() for param in self.parameters],
        }


class OperationCatalog:
    """Case-insensitive registry of operations keyed by operation id.

    Example:
        >>> catalog = build_catalog(document)
        >>> catalog.lookup("GetUsersById").path
        '/users/{id}'
    """

    def __init__(self, operations: Iterable[Operation] = ()) -> None:
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            self.register(operation)

    def register(self, operation: Operation) -> None:
        previous = self._operations.get(operation.key)
        if previous is not None:
            logger.warning(
                "Operation id collision on '%s': %s %s replaces %s %s",
                operation.key,
                operation.method,
                operation.path,
                previous.method,
                previous.path,
            )
        self._operations[operation.key] = operation

    def lookup(self, name: str) -> Operation | None:
        return self._operations.get(name.lower())

    def require(self, name: str) -> Operation:
        operation = self.lookup(name)
        if operation is None:
            raise UnknownOperation(name)
        return operation

    def names(self) -> list[str]:
        return list(self._operations)

    def info(self, name: str) -> dict[str, object]:
        return self.require(name).info()

    def methods(self) -> dict[str, dict[str, object]]:
        return {key: operation.info() for key, operation in self._operations.items()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._operations

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)


def build_catalog(document: OpenAPIDocument) -> OperationCatalog:
    """Build the operation catalog from a resolved OpenAPI document.

    Paths are walked in document order and methods in the fixed order of
    ``HTTP_METHODS``, so id collisions resolve the same way on every build.
    """
    catalog = OperationCatalog()
    paths = cast(dict[str, PathItemObject], document.get("paths") or {})
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        for operation in _build_path_operations(path, item):
            catalog.register(operation)
    logger.debug("Built catalog with %d operations", len(catalog))
    return catalog


def synthesize_operation_id(method: str, path: str) -> str:
    """Derive an operation id from the method and path template.

    Example:
        >>> synthesize_operation_id("GET", "/users/{id}/orders")
        'getUsersByIdOrders'
    """
    with_names = _PLACEHOLDER.sub(lambda match: "By" + _capitalize(match.group(1)), path)
    clean_path = _NON_ALNUM.sub("", with_names)
    return method.lower() + _capitalize(clean_path)


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def _build_path_operations(path: str, item: PathItemObject) -> Iterable[Operation]:
    template = path if path.startswith("/") else f"/{path}"
    common_params = cast(list[ParameterObject], item.get("parameters") or [])
    for method in HTTP_METHODS:
        operation = cast(OperationObject | None, item.get(method.lower()))
        if not isinstance(operation, dict):
            continue
        operation_id = operation.get("operationId") or synthesize_operation_id(method, template)
        yield Operation(
            operation_id=str(operation_id),
            method=method,
            path=template,
            parameters=_merge_parameters(
                common_params,
                cast(list[ParameterObject], operation.get("parameters") or []),
            ),
            request_body=_build_request_body(cast(RequestBodyObject | None, operation.get("requestBody"))),
            summary=operation.get("summary") or "",
            description=operation.get("description") or "",
        )


def _merge_parameters(
    common: list[ParameterObject],
    specific: list[ParameterObject],
) -> tuple[Parameter, ...]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the
    same name and location.
    """
    merged: dict[tuple[str, str], ParameterObject] = {}
    for param in common + specific:
        if not isinstance(param, dict):
            continue
        name = param.get("name")
        location = param.get("in")
        if not name or not location:
            continue
        merged[(name, location)] = param
    return tuple(_build_parameter(param) for param in merged.values())


def _build_parameter(param: ParameterObject) -> Parameter:
    return Parameter(
        name=param.get("name", ""),
        location=param.get("in", ""),
        required=bool(param.get("required", False)),
        description=param.get("description") or "",
    )


def _build_request_body(request_body: RequestBodyObject | None) -> RequestBody | None:
    if not request_body or not isinstance(request_body, dict):
        return None
    return RequestBody(
        required=bool(request_body.get("required", False)),
        content_types=tuple((request_body.get("content") or {}).keys()),
    )
