from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import quote

from .binder import BoundArguments, stringify
from .catalog import Operation
from .errors import EncodingError, InvariantError

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": "openapi-client/1.0",
}

ENTITY_ENCLOSING_METHODS = frozenset({"POST", "PUT", "PATCH"})


@dataclass(frozen=True)
class PreparedRequest:
    """A fully materialised HTTP request, ready for an engine."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


def materialise(
    base_url: str,
    operation: Operation,
    bound: BoundArguments,
    default_headers: Mapping[str, str] | None = None,
) -> PreparedRequest:
    """Turn bound arguments into a concrete request.

    The result depends only on the inputs, so repeated calls produce
    identical requests.
    """
    url = expand_path(base_url.rstrip("/") + operation.path, bound.path)
    for param in operation.parameters_in("path"):
        if f"{{{param.name}}}" in url:
            raise InvariantError(f"Unresolved path parameter '{param.name}' in {url}")
    url = append_query(url, bound.query)
    headers = merge_headers(DEFAULT_HEADERS, default_headers or {}, bound.headers)
    body = None
    if bound.body is not None and operation.method in ENTITY_ENCLOSING_METHODS:
        body = encode_body(bound.body)
    return PreparedRequest(method=operation.method, url=url, headers=headers, body=body)


def expand_path(url: str, path_params: Mapping[str, object]) -> str:
    for name, value in path_params.items():
        url = url.replace(f"{{{name}}}", quote(stringify(value), safe="/"))
    return url


def encode_query(query_params: Mapping[str, object]) -> str:
    """Percent-encode query pairs; every reserved character is escaped.

    List and tuple values repeat the key. Mapping values have no agreed
    encoding and are rejected.
    """
    pairs: list[str] = []
    for key, value in query_params.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            raise EncodingError(f"Object values are not supported for query parameter '{key}'")
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if isinstance(item, (Mapping, list, tuple)):
                raise EncodingError(f"Nested values are not supported for query parameter '{key}'")
            pairs.append(f"{quote(str(key), safe='')}={quote(stringify(item), safe='')}")
    return "&".join(pairs)


def append_query(url: str, query_params: Mapping[str, object]) -> str:
    query = encode_query(query_params)
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def merge_headers(*layers: Mapping[str, str]) -> dict[str, str]:
    """Overlay header mappings; names compare case-insensitively and later layers win."""
    merged: dict[str, tuple[str, str]] = {}
    for layer in layers:
        for name, value in layer.items():
            merged[name.lower()] = (name, str(value))
    return dict(merged.values())


def encode_body(body: object) -> bytes:
    try:
        return json.dumps(body, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Request body is not JSON serialisable: {exc}") from exc
