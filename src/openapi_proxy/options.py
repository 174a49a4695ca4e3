from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .backends.base import Timeout
from .errors import OptionsError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000

KNOWN_KEYS = frozenset({"connectTimeoutMs", "readTimeoutMs", "defaultHeaders", "baseUrlOverride"})


@dataclass(frozen=True)
class ClientOptions:
    connect_timeout_ms: float = DEFAULT_TIMEOUT_MS
    read_timeout_ms: float = DEFAULT_TIMEOUT_MS
    default_headers: Mapping[str, str] = field(default_factory=dict)
    base_url_override: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_headers", MappingProxyType(dict(self.default_headers)))

    @property
    def timeout(self) -> Timeout:
        return Timeout(connect=self.connect_timeout_ms / 1000, read=self.read_timeout_ms / 1000)

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None, strict: bool = False) -> "ClientOptions":
        """Read the caller's options bag.

        Unknown keys are ignored, or rejected when ``strict`` is set.

        Raises:
            OptionsError: If a recognised key holds an unusable value
        """
        if options is None:
            return cls()
        if isinstance(options, ClientOptions):
            return options
        if not isinstance(options, Mapping):
            raise OptionsError("Client options must be a mapping")
        unknown = sorted(str(key) for key in options if key not in KNOWN_KEYS)
        if unknown:
            if strict:
                raise OptionsError(f"Unknown client options: {', '.join(unknown)}")
            logger.debug("Ignoring unknown client options: %s", ", ".join(unknown))

        default_headers = options.get("defaultHeaders") or {}
        if not isinstance(default_headers, Mapping):
            raise OptionsError("'defaultHeaders' must be a mapping")
        base_url_override = options.get("baseUrlOverride")
        if base_url_override is not None and not isinstance(base_url_override, str):
            raise OptionsError("'baseUrlOverride' must be a string")

        return cls(
            connect_timeout_ms=_timeout_ms(options, "connectTimeoutMs"),
            read_timeout_ms=_timeout_ms(options, "readTimeoutMs"),
            default_headers={str(name): str(value) for name, value in default_headers.items()},
            base_url_override=base_url_override or None,
        )


def _timeout_ms(options: Mapping[str, object], key: str) -> float:
    value = options.get(key)
    if value is None:
        return DEFAULT_TIMEOUT_MS
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise OptionsError(f"'{key}' must be a positive number of milliseconds")
    return value
