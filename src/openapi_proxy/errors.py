from __future__ import annotations


class ProxyError(Exception):
    """Base class for every error raised by openapi_proxy."""


class SpecParseError(ProxyError):
    """The OpenAPI document could not be fetched, read, or parsed."""


class UnknownOperation(ProxyError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Operation '{name}' not found in OpenAPI specification")
        self.name = name


class MissingRequiredParameter(ProxyError, LookupError):
    def __init__(self, name: str, operation_id: str | None = None) -> None:
        if operation_id:
            message = f"Missing required parameter '{name}' for operation '{operation_id}'"
        else:
            message = f"Missing required parameter '{name}'"
        super().__init__(message)
        self.name = name
        self.operation_id = operation_id


class EncodingError(ProxyError, ValueError):
    """An argument could not be serialised into the request."""


class TransportError(ProxyError):
    """The request failed before a response was received.

    Attributes:
        kind: ``"timeout"``, ``"connection"`` or ``"unknown"``
    """

    def __init__(self, message: str, kind: str = "unknown") -> None:
        super().__init__(message)
        self.kind = kind


class InvariantError(ProxyError, AssertionError):
    """Internal consistency violation."""


class OptionsError(ProxyError, ValueError):
    """The client options bag is malformed."""
