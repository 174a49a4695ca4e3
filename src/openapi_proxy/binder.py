from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .catalog import Operation
from .errors import EncodingError, MissingRequiredParameter

logger = logging.getLogger(__name__)

BODY_KEY = "body"


@dataclass(frozen=True)
class BoundArguments:
    """Call arguments sorted by where they go in the request."""

    path: dict[str, object] = field(default_factory=dict)
    query: dict[str, object] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: object | None = None


def stringify(value: object) -> str:
    """Render a scalar the way it appears in a URL or header."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def bind_positional(operation: Operation, args: Sequence[object]) -> dict[str, object]:
    """Pair positional arguments with declared parameters by index.

    Arguments beyond the declared parameter list are dropped.
    """
    if isinstance(args, (str, bytes)):
        raise EncodingError("Positional arguments must be a sequence, not a string")
    return {param.name: value for param, value in zip(operation.parameters, args)}


def bind_named(operation: Operation, args: Mapping[str, object] | None) -> dict[str, object]:
    if args is None:
        return {}
    if not isinstance(args, Mapping):
        raise EncodingError(f"Named arguments for '{operation.operation_id}' must be a mapping")
    return dict(args)


def bind(operation: Operation, bag: Mapping[str, object]) -> BoundArguments:
    """Classify an argument bag against the operation's parameters.

    Raises:
        MissingRequiredParameter: If a path parameter, a required parameter,
            or a required request body is not supplied
    """
    path: dict[str, object] = {}
    query: dict[str, object] = {}
    headers: dict[str, str] = {}
    for param in operation.parameters:
        present = param.name in bag and bag[param.name] is not None
        if param.location == "path":
            if not present:
                raise MissingRequiredParameter(param.name, operation.operation_id)
            path[param.name] = bag[param.name]
            continue
        if not present:
            if param.required and param.location in {"query", "header"}:
                raise MissingRequiredParameter(param.name, operation.operation_id)
            continue
        if param.location == "query":
            query[param.name] = bag[param.name]
        elif param.location == "header":
            headers[param.name] = stringify(bag[param.name])
        else:
            logger.debug("Ignoring unsupported %s parameter '%s'", param.location, param.name)

    body = _select_body(operation, bag)
    if body is None and operation.request_body is not None and operation.request_body.required:
        raise MissingRequiredParameter(BODY_KEY, operation.operation_id)
    return BoundArguments(path=path, query=query, headers=headers, body=body)


def _select_body(operation: Operation, bag: Mapping[str, object]) -> object | None:
    if bag.get(BODY_KEY) is not None:
        return bag[BODY_KEY]
    if operation.request_body is None:
        return None
    declared = operation.parameter_names()
    for key, value in bag.items():
        if key in declared or key == BODY_KEY:
            continue
        logger.debug(
            "Using argument '%s' as request body for '%s'",
            key,
            operation.operation_id,
        )
        return value
    return None
