from __future__ import annotations

import re
from typing import cast
from urllib.parse import urljoin, urlparse

from .openapi import OpenAPIDocument, ServerObject

DEFAULT_BASE_URL = "http://localhost"

_VARIABLE = re.compile(r"\{([^}]+)\}")


def resolve_base_url(document: OpenAPIDocument, spec_url: str | None) -> str:
    """Derive the base URL requests are sent to.

    The first declared server wins. Without servers, the scheme, host and
    port of the spec URL are used, and ``http://localhost`` when the spec
    URL has no usable origin. The result never ends with a slash.

    Example:
        >>> resolve_base_url({"openapi": "3.0.3"}, "https://api.example.com:8443/openapi.json")
        'https://api.example.com:8443'
    """
    servers = cast(list[ServerObject], document.get("servers") or [])
    origin = spec_origin(spec_url)
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        url = expand_server_url(servers[0])
        if not urlparse(url).scheme:
            url = urljoin((origin or DEFAULT_BASE_URL) + "/", url)
        return url.rstrip("/")
    return origin or DEFAULT_BASE_URL


def spec_origin(spec_url: str | None) -> str | None:
    """Return ``<scheme>://<host>[:<port>]`` for a URL, or None if it has no origin."""
    if not spec_url:
        return None
    try:
        parsed = urlparse(spec_url)
        port = parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    host = parsed.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        return f"{parsed.scheme}://{host}:{port}"
    return f"{parsed.scheme}://{host}"


def expand_server_url(server: ServerObject) -> str:
    """Substitute server variables with their declared defaults."""
    url = server.get("url", "")
    variables = server.get("variables") or {}

    def _replace(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if variable and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _VARIABLE.sub(_replace, url)
