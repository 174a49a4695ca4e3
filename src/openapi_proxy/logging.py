"""Logging helpers with redaction."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from urllib.parse import unquote

_SENSITIVE_NAMES = re.compile(r"(authorization|cookie|token|secret|api[_-]?key|password)", re.IGNORECASE)

REDACTED = "***REDACTED***"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {name: REDACTED if _SENSITIVE_NAMES.search(name) else value for name, value in headers.items()}


def redact_url(url: str) -> str:
    """Mask query values whose names look like credentials."""
    base, sep, query = url.partition("?")
    if not sep:
        return url
    pairs: list[str] = []
    for pair in query.split("&"):
        name, eq, _ = pair.partition("=")
        if eq and _SENSITIVE_NAMES.search(unquote(name)):
            pair = f"{name}={REDACTED}"
        pairs.append(pair)
    return base + "?" + "&".join(pairs)
